"""
Logging for the publisher.

Every record passes through two filters: one stamps the current tick, post
and user ids onto it, the other scrubs OAuth credentials and sealed token
blobs out of the message. Output is one JSON object per line in production
and a compact colored line in development.
"""

import json
import logging
import re
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sfs_social.config import LoggingSettings

SERVICE_NAME = "sfs-social-publisher"

tick_id_var: ContextVar[Optional[str]] = ContextVar("tick_id", default=None)
post_id_var: ContextVar[Optional[str]] = ContextVar("post_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

CONTEXT_VARS: Dict[str, ContextVar] = {
    "tick_id": tick_id_var,
    "post_id": post_id_var,
    "user_id": user_id_var,
}

_TOKEN_CHARS = r"[\w.\-~+/=]+"

SENSITIVE_PATTERNS: list[re.Pattern] = [
    re.compile(rf'(access|refresh)_?token["\']?\s*[:=]\s*["\']?{_TOKEN_CHARS}', re.IGNORECASE),
    re.compile(rf'(client|app)_?secret["\']?\s*[:=]\s*["\']?{_TOKEN_CHARS}', re.IGNORECASE),
    re.compile(rf'encryption_?key["\']?\s*[:=]\s*["\']?{_TOKEN_CHARS}', re.IGNORECASE),
    re.compile(rf'\b(bearer|basic)\s+{_TOKEN_CHARS}', re.IGNORECASE),
    re.compile(r'[?&](access_token|fb_exchange_token|code)=[^&\s]+', re.IGNORECASE),
    # salt:iv:tag:ciphertext
    re.compile(r'[A-Za-z0-9+/]{16,}={0,2}(:[A-Za-z0-9+/]+={0,2}){3}'),
]

REDACTED = "[REDACTED]"

# Attributes every LogRecord has; anything else was passed via ``extra``
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName", *CONTEXT_VARS}


def redact_sensitive_data(message: str) -> str:
    """Replace credentials in ``message`` with [REDACTED]."""
    if not message:
        return message
    for pattern in SENSITIVE_PATTERNS:
        message = pattern.sub(REDACTED, message)
    return message


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class PublishContextFilter(logging.Filter):
    """Stamp tick, post and user ids ("-" when unset) onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, var in CONTEXT_VARS.items():
            setattr(record, name, var.get() or "-")
        return True


class SensitiveDataFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = redact_sensitive_data(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact_sensitive_data(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp, level, logger, message, service, tick_id, post_id,
    user_id; plus ``extra`` for fields passed by the caller and
    ``exception`` when a traceback is attached.
    """

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        for name in CONTEXT_VARS:
            entry[name] = getattr(record, name, "-")

        extra = _extra_fields(record)
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = redact_sensitive_data(self.formatException(record.exc_info))

        return json.dumps(entry, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL [tick/post] logger: message {extra}`` with level colors."""

    LEVEL_COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        when = time.strftime("%H:%M:%S", time.localtime(record.created))
        tick = getattr(record, "tick_id", "-")[:8]
        post = getattr(record, "post_id", "-")[:12]

        line = (
            f"{when} {color}{record.levelname:<8}{self.RESET} "
            f"[{tick}/{post}] {record.name}: {record.getMessage()}"
        )
        extra = _extra_fields(record)
        if extra:
            line += f" {extra}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_log_level() -> int:
    """Numeric level for LOG_LEVEL (INFO when unset)."""
    return logging.getLevelName(LoggingSettings().log_level)


def should_use_json_format() -> bool:
    """JSON in production, or anywhere LOG_FORMAT_JSON is true."""
    settings = LoggingSettings()
    return settings.log_format_json or settings.is_production


def setup_logging(
    service_name: str = SERVICE_NAME,
    log_level: Optional[int] = None,
    force_json: bool = False,
) -> logging.Logger:
    """
    Install a single stdout handler on the root logger.

    Replaces any handlers already present, so calling it twice is harmless.
    """
    level = get_log_level() if log_level is None else log_level
    use_json = force_json or should_use_json_format()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(PublishContextFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JSONFormatter(service_name) if use_json else DevelopmentFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Request logs from httpx include query strings with tokens
    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    root.debug(
        f"Logging configured ({'json' if use_json else 'development'}, "
        f"{logging.getLevelName(level)})"
    )
    return root


def set_publish_context(
    tick_id: Optional[str] = None,
    post_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    """Set the ids attached to log records from the current task; None leaves a value as is."""
    for name, value in (("tick_id", tick_id), ("post_id", post_id), ("user_id", user_id)):
        if value is not None:
            CONTEXT_VARS[name].set(value)


def clear_publish_context() -> None:
    for var in CONTEXT_VARS.values():
        var.set(None)


class Timer:
    """
    Measures a block and optionally logs its duration.

        with Timer("scheduler_tick", logger):
            ...
    """

    def __init__(
        self,
        name: str,
        logger: Optional[logging.Logger] = None,
        log_level: int = logging.DEBUG,
    ):
        self.name = name
        self.logger = logger
        self.log_level = log_level
        self._started: Optional[float] = None
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed_ms = (time.perf_counter() - self._started) * 1000
        if self.logger is None:
            return
        outcome = "finished" if exc_type is None else "failed"
        self.logger.log(
            self.log_level,
            f"{self.name} {outcome} after {self.elapsed_ms:.1f}ms",
            extra={"operation": self.name, "duration_ms": round(self.elapsed_ms, 2)},
        )
