"""
Flush Scheduler

Decides WHEN a session flushes its buffer:
1. Growth below min_chars_delta is coalesced until the next eligible tick
2. Forced requests bypass the size check and stay pending until served
3. A per-minute ceiling spaces flushes out with a single deferred gate timer

At most one flush runs at a time. A request arriving mid-flush is served
by the re-check that follows the flush, not by a new timer.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from chat_streamer.domain.services.rate_limit import min_interval
from chat_streamer.shared import constants

logger = logging.getLogger(__name__)


@dataclass
class SchedulerOptions:
    """Flush timing policy."""
    flush_interval: float = constants.FLUSH_INTERVAL_SECONDS
    min_chars_delta: int = constants.MIN_CHARS_DELTA
    max_updates_per_minute: int = constants.MAX_UPDATES_PER_MINUTE


class FlushScheduler:
    """
    Periodic, rate-limited driver of a flush coroutine.

    Args:
        options: Timing policy
        get_size: Returns the current buffer size
        flush: Coroutine function called with the force flag
        on_error: Receives exceptions raised by flush; the scheduler keeps going
    """

    def __init__(
        self,
        options: Optional[SchedulerOptions],
        get_size: Callable[[], int],
        flush: Callable[[bool], Awaitable[None]],
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        options = options or SchedulerOptions()
        self.flush_interval = options.flush_interval
        self.min_chars_delta = options.min_chars_delta
        self.min_interval = min_interval(options.max_updates_per_minute)
        self._get_size = get_size
        self._flush = flush
        self._on_error = on_error

        self._last_flush_size = 0
        self._last_flush_at: Optional[float] = None
        self._flushing = False
        self._force_pending = False
        self._stopped = False

        self._tick_task: Optional[asyncio.Task] = None
        self._gate_timer: Optional[asyncio.TimerHandle] = None
        self._flush_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    def start(self) -> None:
        """Start periodic ticks (requires a running event loop)."""
        if self.is_running:
            return
        self._stopped = False
        self._tick_task = asyncio.get_running_loop().create_task(self._tick_loop())

    def stop(self) -> None:
        """Cancel ticks and the gate timer. A running flush completes normally."""
        self._stopped = True
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None
        if self._gate_timer is not None:
            self._gate_timer.cancel()
            self._gate_timer = None

    def request_flush(self, force: bool = False) -> None:
        if force:
            self._force_pending = True
        self._maybe_flush()

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval)
            self._maybe_flush()

    def _maybe_flush(self) -> None:
        if self._stopped or self._flushing:
            return

        size_delta = self._get_size() - self._last_flush_size
        if not (self._force_pending or size_delta >= self.min_chars_delta):
            return

        loop = asyncio.get_running_loop()
        wait = 0.0
        if self._last_flush_at is not None:
            wait = max(0.0, self.min_interval - (loop.time() - self._last_flush_at))
        if wait > 0:
            if self._gate_timer is None:
                logger.debug(f"Flush rate-gated, retrying in {wait:.3f}s")
                self._gate_timer = loop.call_later(wait, self._on_gate_timer)
            return

        self._flushing = True
        force = self._force_pending
        self._force_pending = False
        self._flush_task = loop.create_task(self._run_flush(force))

    def _on_gate_timer(self) -> None:
        self._gate_timer = None
        self._maybe_flush()

    async def _run_flush(self, force: bool) -> None:
        try:
            await self._flush(force)
        except Exception as e:
            logger.debug(f"Flush failed (force={force}): {e!r}")
            if self._on_error is not None:
                self._on_error(e)
        finally:
            self._flushing = False
            self._last_flush_at = asyncio.get_running_loop().time()
            self._last_flush_size = self._get_size()
        self._maybe_flush()
