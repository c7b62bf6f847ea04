"""Unit tests for FlushScheduler."""

import asyncio

import pytest

from chat_streamer.application.services.flush_scheduler import FlushScheduler, SchedulerOptions


class Recorder:
    """Flush target recording force flags."""

    def __init__(self, delay: float = 0.0, error: Exception = None):
        self.size = 0
        self.flushes = []
        self.errors = []
        self.active = 0
        self.max_active = 0
        self._delay = delay
        self._error = error

    async def flush(self, force: bool) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            self.flushes.append(force)
            if self._delay:
                await asyncio.sleep(self._delay)
            if self._error is not None:
                raise self._error
        finally:
            self.active -= 1


def make_scheduler(recorder: Recorder, **options) -> FlushScheduler:
    return FlushScheduler(
        SchedulerOptions(**options),
        get_size=lambda: recorder.size,
        flush=recorder.flush,
        on_error=recorder.errors.append,
    )


class TestFlushSchedulerEligibility:
    """Tests for size threshold and force."""

    @pytest.mark.asyncio
    async def test_flushes_on_tick_when_delta_reached(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=0.02, min_chars_delta=10, max_updates_per_minute=0)
        scheduler.start()

        recorder.size = 15
        await asyncio.sleep(0.06)
        scheduler.stop()

        assert recorder.flushes == [False]

    @pytest.mark.asyncio
    async def test_no_flush_below_delta(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=0.02, min_chars_delta=10, max_updates_per_minute=0)
        scheduler.start()

        recorder.size = 5
        scheduler.request_flush()
        await asyncio.sleep(0.06)
        scheduler.stop()

        assert recorder.flushes == []

    @pytest.mark.asyncio
    async def test_force_bypasses_delta(self):
        recorder = Recorder()
        recorder.size = 5
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=100, max_updates_per_minute=0)
        scheduler.start()

        scheduler.request_flush(force=True)
        await asyncio.sleep(0.01)
        scheduler.stop()

        assert recorder.flushes == [True]

    @pytest.mark.asyncio
    async def test_delta_measured_from_last_flush(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=10, max_updates_per_minute=0)

        recorder.size = 10
        scheduler.request_flush()
        await asyncio.sleep(0.01)
        recorder.size = 15
        scheduler.request_flush()
        await asyncio.sleep(0.01)

        assert recorder.flushes == [False]


class TestFlushSchedulerRateLimit:
    """Tests for the per-minute ceiling."""

    @pytest.mark.asyncio
    async def test_rate_gate_defers_second_flush(self):
        recorder = Recorder()
        # 600/min -> 0.1s between flushes
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=1, max_updates_per_minute=600)

        recorder.size = 10
        scheduler.request_flush()
        await asyncio.sleep(0.01)
        recorder.size = 20
        scheduler.request_flush()
        scheduler.request_flush()
        await asyncio.sleep(0.02)

        assert len(recorder.flushes) == 1

        await asyncio.sleep(0.15)
        scheduler.stop()

        assert len(recorder.flushes) == 2

    @pytest.mark.asyncio
    async def test_forced_flush_delayed_not_dropped(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=100, max_updates_per_minute=600)

        scheduler.request_flush(force=True)
        await asyncio.sleep(0.01)
        scheduler.request_flush(force=True)
        await asyncio.sleep(0.01)

        assert recorder.flushes == [True]

        await asyncio.sleep(0.15)
        scheduler.stop()

        assert recorder.flushes == [True, True]


class TestFlushSchedulerConcurrency:
    """Tests for single in-flight flush and sticky force."""

    @pytest.mark.asyncio
    async def test_at_most_one_flush_in_flight(self):
        recorder = Recorder(delay=0.03)
        scheduler = make_scheduler(recorder, flush_interval=0.005, min_chars_delta=1, max_updates_per_minute=0)
        scheduler.start()

        for _ in range(10):
            recorder.size += 5
            scheduler.request_flush()
            await asyncio.sleep(0.005)
        await asyncio.sleep(0.1)
        scheduler.stop()

        assert recorder.max_active == 1
        assert len(recorder.flushes) < 10

    @pytest.mark.asyncio
    async def test_force_requested_mid_flush_is_served_after(self):
        recorder = Recorder(delay=0.03)
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=100, max_updates_per_minute=0)

        scheduler.request_flush(force=True)
        await asyncio.sleep(0.01)
        assert scheduler.is_flushing

        scheduler.request_flush(force=True)
        await asyncio.sleep(0.08)

        assert recorder.flushes == [True, True]
        assert recorder.max_active == 1


class TestFlushSchedulerErrors:
    """Tests for failure handling."""

    @pytest.mark.asyncio
    async def test_errors_go_to_callback(self):
        recorder = Recorder(error=RuntimeError("flush failed"))
        recorder.size = 100
        scheduler = make_scheduler(recorder, flush_interval=0.02, min_chars_delta=1, max_updates_per_minute=0)
        scheduler.start()

        await asyncio.sleep(0.05)
        scheduler.stop()

        assert len(recorder.errors) == 1
        assert str(recorder.errors[0]) == "flush failed"

    @pytest.mark.asyncio
    async def test_failed_flush_still_updates_bookkeeping(self):
        recorder = Recorder(error=RuntimeError("flush failed"))
        recorder.size = 100
        scheduler = make_scheduler(recorder, flush_interval=0.01, min_chars_delta=1, max_updates_per_minute=0)
        scheduler.start()

        await asyncio.sleep(0.05)
        scheduler.stop()

        # Size did not change after the failure, so no retry storm
        assert len(recorder.flushes) == 1


class TestFlushSchedulerLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_no_flush_after_stop(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=0.01, min_chars_delta=1, max_updates_per_minute=0)
        scheduler.start()
        scheduler.stop()

        recorder.size = 100
        await asyncio.sleep(0.05)

        assert recorder.flushes == []
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_stop_cancels_gate_timer(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=1, max_updates_per_minute=600)

        recorder.size = 10
        scheduler.request_flush()
        await asyncio.sleep(0.01)
        recorder.size = 20
        scheduler.request_flush()
        scheduler.stop()
        await asyncio.sleep(0.15)

        assert len(recorder.flushes) == 1

    @pytest.mark.asyncio
    async def test_inflight_flush_after_stop_does_not_rearm(self):
        recorder = Recorder(delay=0.03)
        scheduler = make_scheduler(recorder, flush_interval=1.0, min_chars_delta=100, max_updates_per_minute=0)

        scheduler.request_flush(force=True)
        await asyncio.sleep(0.01)
        assert scheduler.is_flushing
        scheduler.request_flush(force=True)
        scheduler.stop()
        await asyncio.sleep(0.08)

        assert recorder.flushes == [True]
        assert not scheduler.is_flushing

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        recorder = Recorder()
        scheduler = make_scheduler(recorder, flush_interval=0.01)

        scheduler.start()
        task = scheduler._tick_task
        scheduler.start()

        assert scheduler._tick_task is task
        scheduler.stop()
