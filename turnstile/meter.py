"""Meters that pace a stream of events against a flow-control policy.

Responsibilities:
- Track running time across start/pause cycles.
- Compute, without side effects, how long an event must wait under a policy.
- Block the calling thread (or task) for that long, honoring interruption.

Key types:
- `Meter`: abstract timer plus the delay contract.
- `NoopMeter`: never delays; disables pacing without changing call sites.
- `PausableMeter`: abstract base for policies measured over running time only.
- `RateControlledMeter`: keeps cumulative event counts at or below a `FlowRate`.

Meters do no locking. Concurrent callers each compute a delay from whatever state
they observe, so exact compliance under concurrency needs external serialization.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from contextlib import contextmanager
import threading
import time
from typing import Awaitable, Callable, Iterator

from .errors import MeterCancelledError
from .rate import FlowRate
from .telemetry import log_meter_event


Clock = Callable[[], int]
Waiter = Callable[[float], bool]
AsyncSleeper = Callable[[float], Awaitable[None]]


def monotonic_millis() -> int:
    """Return a monotonic timestamp in whole milliseconds."""

    return time.monotonic_ns() // 1_000_000


class Meter(ABC):
    """Abstract run/pause timer with a pluggable delay policy.

    A fresh meter is paused with no accumulated time. ``elapsed_time()`` covers
    only the current run segment; time from completed segments is reported by
    ``previous_elapsed_time()``.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        waiter: Waiter | None = None,
        async_sleeper: AsyncSleeper | None = None,
    ) -> None:
        """Initialize a paused meter.

        Args:
            clock: Millisecond clock; defaults to `monotonic_millis`.
            waiter: Blocks for the given seconds and returns ``True`` when the wait
                was interrupted. Defaults to waiting on this meter's interrupt event.
            async_sleeper: Awaitable sleep used by `delay_async`.
        """

        self._clock = clock or monotonic_millis
        self._interrupted = threading.Event()
        self._waiter = waiter or self._interrupted.wait
        self._async_sleeper = async_sleeper or asyncio.sleep
        self._previous_elapsed = 0
        self._last_start: int | None = None
        self._paused = True

    def reset(self) -> None:
        """Return to the freshly-initialized paused state, discarding elapsed time."""

        self._previous_elapsed = 0
        self._last_start = None
        self._paused = True
        log_meter_event("DEBUG", "reset")

    def is_paused(self) -> bool:
        """Return ``True`` while paused or never started."""

        return self._paused

    def start(self) -> None:
        """Start measuring running time.

        Starting an already running meter rebases the segment start to now; time
        from the interrupted segment is dropped rather than accumulated.
        """

        now = self._clock()
        if not self._paused and self._last_start is not None:
            log_meter_event("DEBUG", "restart", dropped_ms=now - self._last_start)
        self._last_start = now
        self._paused = False
        log_meter_event("DEBUG", "start", previous_ms=self._previous_elapsed)

    def pause(self) -> None:
        """Stop measuring running time, folding the current segment into the total."""

        self._previous_elapsed += self.elapsed_time()
        self._last_start = None
        self._paused = True
        log_meter_event("DEBUG", "pause", previous_ms=self._previous_elapsed)

    def elapsed_time(self) -> int:
        """Milliseconds since the most recent start, or 0 while paused."""

        if self._paused or self._last_start is None:
            return 0
        return self._clock() - self._last_start

    def previous_elapsed_time(self) -> int:
        """Milliseconds accumulated by all completed run segments."""

        return self._previous_elapsed

    @abstractmethod
    def delay_for(self, event_count: int) -> int:
        """Return the delay in milliseconds that `delay` would apply to ``event_count``.

        Implementations must have no side effects so the method can be called at
        any time, including while paused.
        """

    def interrupt(self) -> None:
        """Cancel a delay currently blocked on the default waiter.

        If no delay is blocked, the next blocking delay is cancelled instead.
        """

        self._interrupted.set()

    def delay(self, event_count: int) -> int:
        """Block the calling thread until ``event_count`` events comply with the policy.

        Args:
            event_count: Total number of events recorded against this meter.

        Returns:
            The delay that was applied, in milliseconds.

        Raises:
            MeterCancelledError: If the wait was interrupted before it completed.
        """

        delay_ms = self.delay_for(event_count)
        log_meter_event("TRACE", "delay", event_count=event_count, delay_ms=delay_ms)

        if delay_ms > 0 and self._waiter(delay_ms / 1000):
            self._interrupted.clear()
            log_meter_event("WARNING", "cancelled", event_count=event_count, delay_ms=delay_ms)
            raise MeterCancelledError(event_count=event_count, delay_ms=delay_ms)
        return delay_ms

    async def delay_async(self, event_count: int) -> int:
        """Asynchronous `delay`; task cancellation propagates as `asyncio.CancelledError`."""

        delay_ms = self.delay_for(event_count)
        log_meter_event("TRACE", "delay", event_count=event_count, delay_ms=delay_ms)

        if delay_ms > 0:
            await self._async_sleeper(delay_ms / 1000)
        return delay_ms


class NoopMeter(Meter):
    """Meter that never delays."""

    def delay_for(self, event_count: int) -> int:
        return 0


class PausableMeter(Meter):
    """Base for policies that measure time only while the meter is running."""

    def resume(self) -> None:
        """Resume measuring after a pause."""

        self.start()

    def total_elapsed_time(self) -> int:
        """Milliseconds of running time across all segments, pauses excluded."""

        return self.previous_elapsed_time() + self.elapsed_time()

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Pause for the duration of the block, resuming only if previously running."""

        was_running = not self.is_paused()
        self.pause()
        try:
            yield
        finally:
            if was_running:
                self.resume()


class RateControlledMeter(PausableMeter):
    """Meter that keeps the cumulative event count at or below a flow rate.

    The delay for ``n`` events is the ideal running time for ``n`` events at the
    configured rate minus the running time observed so far. The policy is anchored
    to cumulative counts, so idle running time builds up credit for later bursts.
    """

    def __init__(
        self,
        rate: FlowRate | str,
        *,
        clock: Clock | None = None,
        waiter: Waiter | None = None,
        async_sleeper: AsyncSleeper | None = None,
    ) -> None:
        """Initialize a paused meter for ``rate``, parsing it first when given as text."""

        self._rate = FlowRate.coerce(rate)
        super().__init__(clock=clock, waiter=waiter, async_sleeper=async_sleeper)

    @property
    def rate(self) -> FlowRate:
        return self._rate

    def delay_for(self, event_count: int) -> int:
        duration_ms = self._rate.duration.total_seconds() * 1000
        ideal_ms = int(event_count / self._rate.volume * duration_ms)
        return max(0, ideal_ms - (self.previous_elapsed_time() + self.elapsed_time()))
