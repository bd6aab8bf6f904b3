"""
Background scheduler for publishing due posts.

Runs one tick immediately on start, then one tick every interval until
stopped. Stopping prevents future ticks; a tick already in progress is
allowed to finish.
"""

import asyncio
import logging
import signal
from enum import Enum
from typing import Any, Dict, Optional, Set

from sfs_social.config import PublisherSettings, get_settings
from sfs_social.types.social import PostStatus, utc_now
from sfs_social.utils.logging import clear_publish_context, setup_logging

from .publisher import PublisherService, publisher_service

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class PublisherScheduler:
    """
    Fixed-interval driver for PublisherService.process_scheduled_posts.

    At most one timer is active per scheduler. Calling start() while running
    is a no-op; stop() is idempotent; a start() after stop() behaves like a
    fresh start.
    """

    def __init__(
        self,
        publisher: Optional[PublisherService] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            publisher: Service whose due posts are processed each tick
            interval_seconds: Seconds between ticks (defaults to
                PUBLISHER_INTERVAL_SECONDS)
        """
        self.publisher = publisher or publisher_service
        if interval_seconds is None:
            interval_seconds = PublisherSettings().publisher_interval_seconds
        self.interval_seconds = interval_seconds

        self._state = SchedulerState.IDLE
        self._timer: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()
        # Bumped by every start(); only the latest start may arm the timer
        self._generation = 0

        self._metrics: Dict[str, Any] = {
            "ticks": 0,
            "posts_published": 0,
            "posts_failed": 0,
            "last_tick_at": None,
            "started_at": None,
        }

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    @property
    def metrics(self) -> Dict[str, Any]:
        """Get scheduler metrics."""
        return {**self._metrics, "state": self._state.value}

    async def start(self) -> None:
        """Run one tick now and arm the repeating timer."""
        if self.is_running:
            logger.warning("Publisher is already running")
            return

        self._state = SchedulerState.RUNNING
        self._generation += 1
        generation = self._generation
        self._metrics["started_at"] = utc_now()
        logger.info(f"Starting publisher (interval={self.interval_seconds}s)")

        await self._run_tick()

        # stop(), or stop() then start(), may have happened while the first tick ran
        if self.is_running and self._generation == generation:
            self._timer = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Cancel the timer. Safe to call when not running."""
        timer, self._timer = self._timer, None
        was_running = self.is_running
        self._state = SchedulerState.IDLE

        if timer is not None and not timer.done():
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass

        if was_running:
            logger.info("Publisher stopped")

    async def wait_for_current_tick(self) -> None:
        """Wait for in-flight ticks, if any, to finish."""
        pending = {tick for tick in self._ticks if not tick.done()}
        if pending:
            await asyncio.wait(pending)

    async def _run_loop(self) -> None:
        while self.is_running:
            await asyncio.sleep(self.interval_seconds)
            if not self.is_running:
                break
            await self._run_tick()

    async def _run_tick(self) -> None:
        # Shielded so cancelling the timer never interrupts a tick
        tick = asyncio.create_task(self._tick())
        self._ticks.add(tick)
        tick.add_done_callback(self._ticks.discard)
        await asyncio.shield(tick)

    async def _tick(self) -> None:
        self._metrics["ticks"] += 1
        try:
            results = await self.publisher.process_scheduled_posts()
        except Exception:
            logger.exception("Error in publisher tick")
            return
        finally:
            self._metrics["last_tick_at"] = utc_now()
            clear_publish_context()

        for result in results.values():
            if result.status == PostStatus.PUBLISHED:
                self._metrics["posts_published"] += 1
            elif result.status == PostStatus.FAILED:
                self._metrics["posts_failed"] += 1


# Default scheduler instance
scheduler = PublisherScheduler()


async def start_publisher(publisher_scheduler: Optional[PublisherScheduler] = None) -> PublisherScheduler:
    """Start the given scheduler, or the default one."""
    target = publisher_scheduler or scheduler
    await target.start()
    return target


async def stop_publisher(publisher_scheduler: Optional[PublisherScheduler] = None) -> None:
    """Stop the given scheduler, or the default one."""
    target = publisher_scheduler or scheduler
    await target.stop()


async def run_worker() -> None:
    """Run the publisher as a standalone process until SIGINT/SIGTERM."""
    setup_logging()
    settings = get_settings()

    logger.info("Starting publisher worker process", extra=settings.get_config_summary())

    if not settings.publisher.publisher_enabled:
        logger.warning("Publisher is disabled (PUBLISHER_ENABLED is false)")
        return

    worker_scheduler = PublisherScheduler(
        publisher=PublisherService(
            max_concurrent_posts=settings.publisher.publisher_max_concurrent_posts,
        ),
        interval_seconds=settings.publisher.publisher_interval_seconds,
    )

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await start_publisher(worker_scheduler)
    try:
        await shutdown.wait()
        logger.info("Received shutdown signal")
    finally:
        await stop_publisher(worker_scheduler)
        await worker_scheduler.wait_for_current_tick()


def main() -> None:
    """Entry point for running the worker as a standalone script."""
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
