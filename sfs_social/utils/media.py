"""Classification of media URLs by type."""

import mimetypes
import posixpath
from typing import Iterable, Optional
from urllib.parse import urlparse

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv", ".mpeg"})


def media_kind(url: str) -> Optional[str]:
    """
    Classify a media URL as "image" or "video" from its path extension.

    Query strings and fragments are ignored. Returns None when the type
    cannot be determined.
    """
    path = urlparse(url).path
    ext = posixpath.splitext(path)[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in VIDEO_EXTENSIONS:
        return "video"

    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        major = guessed.split("/", 1)[0]
        if major in ("image", "video"):
            return major
    return None


def has_media_kind(
    media_urls: Optional[Iterable[str]],
    kind: str,
    allow_unknown: bool = False,
) -> bool:
    """
    Check whether any URL in ``media_urls`` is of ``kind``.

    With ``allow_unknown``, a URL whose kind cannot be determined also counts.
    """
    accepted = (kind, None) if allow_unknown else (kind,)
    return any(media_kind(url) in accepted for url in media_urls or [])
