"""
Periodic refresh of derived snapshots.

A RefreshScheduler owns one data series (a ranked market list, one order book,
the order book summary). Each tick fetches a fresh snapshot with a bounded
timeout and publishes it atomically. Failed ticks keep the last good snapshot
and record the error; the next tick runs on schedule regardless (fixed
cadence, no backoff, no retry limit).

Tick lifecycle: IDLE -> FETCHING -> SUCCEEDED | FAILED -> IDLE
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from ..errors import NotFoundError, UpstreamUnavailableError
from ..logging.config import get_refresh_logger, log_tick_outcome
from ..utils.time import seconds_since, utc_now

T = TypeVar("T")

logger = get_refresh_logger(__name__)


class TickPhase(str, Enum):
    """Refresh tick phases."""
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Failure categories surfaced to consumers."""
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RefreshState(Generic[T]):
    """Latest published refresh outcome for one series."""

    last_snapshot: Optional[T] = None
    last_success_at: Optional[datetime] = None
    last_error: Optional[ErrorKind] = None
    last_error_message: Optional[str] = None
    last_outcome: Optional[TickPhase] = None      # SUCCEEDED or FAILED once a tick completed
    generation: int = 0                           # Generation of the last applied tick

    @property
    def has_snapshot(self) -> bool:
        return self.last_success_at is not None

    @property
    def is_stale(self) -> bool:
        """True when a snapshot exists but the most recent tick failed."""
        return self.has_snapshot and self.last_error is not None

    def seconds_since_success(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.last_success_at is None:
            return None
        return seconds_since(self.last_success_at, now)


class RefreshScheduler(Generic[T]):
    """
    Fixed-cadence refresh loop for a single data series.

    Ticks of one scheduler never overlap when driven by ``start``: the loop
    awaits each tick and then sleeps the remainder of the period, delaying the
    timer when a tick overruns. Ticks may also be triggered directly through
    ``tick``; every fetch takes a generation number and a completion is only
    published when it is newer than the last published one, so a slow stale
    response never overwrites a fresher snapshot.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        interval_seconds: float,
        timeout_seconds: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize a refresh scheduler.

        Args:
            name: Series name used in logs
            fetch: Coroutine function producing a fresh snapshot
            interval_seconds: Tick period
            timeout_seconds: Bound on a single fetch; exceeding it fails the tick
            clock: Source of success timestamps
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")

        self.name = name
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.logger = logger.bind(series=name)
        self._fetch = fetch
        self._clock = clock
        self._state: RefreshState[T] = RefreshState()
        self._started_generation = 0
        self._in_flight = 0
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> RefreshState[T]:
        """Current published state; replaced wholesale on each applied tick."""
        return self._state

    @property
    def phase(self) -> TickPhase:
        return TickPhase.FETCHING if self._in_flight else TickPhase.IDLE

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> RefreshState[T]:
        """
        Run one refresh cycle.

        Never raises for fetch failures: timeouts, upstream errors and any
        other exception from the fetch are recorded as a FAILED tick.

        Returns:
            The published state after this tick
        """
        if self._cancelled:
            return self._state

        self._started_generation += 1
        generation = self._started_generation
        self._in_flight += 1

        try:
            try:
                result = await asyncio.wait_for(self._fetch(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                self._complete_failure(
                    generation, ErrorKind.UPSTREAM_UNAVAILABLE,
                    f"Fetch timed out after {self.timeout_seconds}s"
                )
            except NotFoundError as e:
                self._complete_failure(generation, ErrorKind.NOT_FOUND, str(e))
            except UpstreamUnavailableError as e:
                self._complete_failure(generation, ErrorKind.UPSTREAM_UNAVAILABLE, str(e))
            except Exception as e:
                self.logger.exception("Unexpected error during refresh fetch", generation=generation)
                self._complete_failure(generation, ErrorKind.UPSTREAM_UNAVAILABLE, str(e))
            else:
                self._complete_success(generation, result)
        finally:
            self._in_flight -= 1

        return self._state

    def _should_apply(self, generation: int) -> bool:
        if self._cancelled or generation <= self._state.generation:
            log_tick_outcome(
                self.logger, self.name, "discarded", generation,
                context={"cancelled": self._cancelled, "published_generation": self._state.generation}
            )
            return False
        return True

    def _complete_success(self, generation: int, result: T) -> None:
        if not self._should_apply(generation):
            return
        self._state = RefreshState(
            last_snapshot=result,
            last_success_at=self._clock(),
            last_error=None,
            last_error_message=None,
            last_outcome=TickPhase.SUCCEEDED,
            generation=generation,
        )
        log_tick_outcome(self.logger, self.name, TickPhase.SUCCEEDED.value, generation)

    def _complete_failure(self, generation: int, kind: ErrorKind, message: str) -> None:
        if not self._should_apply(generation):
            return
        self._state = replace(
            self._state,
            last_error=kind,
            last_error_message=message,
            last_outcome=TickPhase.FAILED,
            generation=generation,
        )
        log_tick_outcome(
            self.logger, self.name, TickPhase.FAILED.value, generation,
            context={"error": kind.value, "message": message, "has_snapshot": self._state.has_snapshot}
        )

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._cancelled:
            started = loop.time()
            await self.tick()
            elapsed = loop.time() - started
            await asyncio.sleep(max(self.interval_seconds - elapsed, 0.0))

    def start(self) -> asyncio.Task:
        """
        Start the periodic loop on the running event loop; the first tick runs immediately.

        Raises:
            RuntimeError: If the scheduler has already been stopped
        """
        if self._cancelled:
            raise RuntimeError(f"Refresh scheduler '{self.name}' has been stopped")
        if self.is_running:
            return self._task

        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"refresh:{self.name}")
        self.logger.info("Refresh scheduler started", interval_seconds=self.interval_seconds)
        return self._task

    def cancel(self) -> None:
        """Request cancellation; no tick starts afterwards and in-flight results are discarded."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
        self.logger.info("Refresh scheduler cancelled")

    async def stop(self) -> None:
        """Cancel and wait for the loop task to finish."""
        self.cancel()
        task = self._task
        if task is None or task.done():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
