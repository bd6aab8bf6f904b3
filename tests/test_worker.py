"""
Tests for the publisher scheduler lifecycle.

Verifies that:
- start() ticks immediately and then on every interval
- A second start() is a no-op and stop() is idempotent
- No ticks happen after stop(); a later start() is a fresh start
- An in-flight tick finishes after stop()
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from sfs_social.social.worker import (
    PublisherScheduler,
    SchedulerState,
    start_publisher,
    stop_publisher,
)
from sfs_social.types.social import PostStatus, PublishPostResult


def make_publisher(side_effect=None):
    publisher = MagicMock()
    publisher.process_scheduled_posts = AsyncMock(return_value={}, side_effect=side_effect)
    return publisher


class TestPublisherScheduler:
    """Tests for PublisherScheduler."""

    @pytest.mark.asyncio
    async def test_start_ticks_immediately(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        await scheduler.start()
        try:
            assert publisher.process_scheduled_posts.await_count == 1
            assert scheduler.state == SchedulerState.RUNNING
        finally:
            await scheduler.stop()

        assert scheduler.state == SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_second_start_is_noop(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        await scheduler.start()
        await scheduler.start()
        try:
            assert publisher.process_scheduled_posts.await_count == 1
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_ticks_repeat_on_interval(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=0.01)

        await scheduler.start()
        try:
            await asyncio.sleep(0.1)
        finally:
            await scheduler.stop()

        assert publisher.process_scheduled_posts.await_count >= 3

    @pytest.mark.asyncio
    async def test_no_ticks_after_stop(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=0.01)

        await scheduler.start()
        await asyncio.sleep(0.03)
        await scheduler.stop()
        count = publisher.process_scheduled_posts.await_count

        await asyncio.sleep(0.05)

        assert publisher.process_scheduled_posts.await_count == count

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        scheduler = PublisherScheduler(make_publisher(), interval_seconds=60)

        await scheduler.stop()
        await scheduler.start()
        await scheduler.stop()
        await scheduler.stop()

        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_restart_is_fresh_start(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        await scheduler.start()
        await scheduler.stop()
        await scheduler.start()
        try:
            assert publisher.process_scheduled_posts.await_count == 2
            assert scheduler.is_running
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_in_flight_tick_finishes_after_stop(self):
        second_tick_started = asyncio.Event()
        finished = []
        calls = 0

        async def tick():
            nonlocal calls
            calls += 1
            number = calls
            if number == 2:
                second_tick_started.set()
            await asyncio.sleep(0.05)
            finished.append(number)
            return {}

        publisher = MagicMock()
        publisher.process_scheduled_posts = tick
        scheduler = PublisherScheduler(publisher, interval_seconds=0.01)

        await scheduler.start()
        await asyncio.wait_for(second_tick_started.wait(), timeout=1)
        await scheduler.stop()

        assert finished == [1]
        await scheduler.wait_for_current_tick()
        assert finished == [1, 2]

    @pytest.mark.asyncio
    async def test_restart_during_first_tick_keeps_one_timer(self):
        async def slow_tick():
            await asyncio.sleep(0.05)
            return {}

        publisher = MagicMock()
        publisher.process_scheduled_posts = slow_tick
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        first = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0.01)
        await scheduler.stop()
        second = asyncio.create_task(scheduler.start())
        await asyncio.gather(first, second)

        loops = [
            task for task in asyncio.all_tasks()
            if task.get_coro().__qualname__ == "PublisherScheduler._run_loop"
        ]
        try:
            assert len(loops) == 1
            assert scheduler.is_running
        finally:
            await scheduler.stop()

        assert all(loop.done() for loop in loops)

    @pytest.mark.asyncio
    async def test_wait_covers_overlapping_ticks(self):
        finished = []

        async def slow_tick():
            await asyncio.sleep(0.05)
            finished.append(True)
            return {}

        publisher = MagicMock()
        publisher.process_scheduled_posts = slow_tick
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        first = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0.01)
        await scheduler.stop()
        second = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0.01)
        await scheduler.stop()

        await scheduler.wait_for_current_tick()

        assert finished == [True, True]
        await asyncio.gather(first, second)

    @pytest.mark.asyncio
    async def test_tick_error_does_not_stop_loop(self):
        calls = 0

        async def flaky():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            return {}

        publisher = make_publisher(side_effect=flaky)
        scheduler = PublisherScheduler(publisher, interval_seconds=0.01)

        await scheduler.start()
        try:
            await asyncio.sleep(0.05)
        finally:
            await scheduler.stop()

        assert publisher.process_scheduled_posts.await_count >= 2

    @pytest.mark.asyncio
    async def test_metrics_count_outcomes(self):
        publisher = make_publisher()
        publisher.process_scheduled_posts.return_value = {
            "p1": PublishPostResult(success=True, status=PostStatus.PUBLISHED),
            "p2": PublishPostResult(success=False, status=PostStatus.PUBLISHED),
            "p3": PublishPostResult(success=False, status=PostStatus.FAILED),
        }
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        await scheduler.start()
        await scheduler.stop()

        metrics = scheduler.metrics
        assert metrics["ticks"] == 1
        assert metrics["posts_published"] == 2
        assert metrics["posts_failed"] == 1
        assert metrics["state"] == "idle"


class TestModuleLifecycle:
    """Tests for start_publisher / stop_publisher."""

    @pytest.mark.asyncio
    async def test_start_and_stop_explicit_scheduler(self):
        publisher = make_publisher()
        scheduler = PublisherScheduler(publisher, interval_seconds=60)

        returned = await start_publisher(scheduler)
        await start_publisher(scheduler)
        try:
            assert returned is scheduler
            assert publisher.process_scheduled_posts.await_count == 1
        finally:
            await stop_publisher(scheduler)

        assert not scheduler.is_running
        await stop_publisher(scheduler)
