"""
Debounced execution on the asyncio event loop.

A Debouncer runs its action once a quiet period has passed since the last
schedule() call. The action is invoked when the timer fires, so it always
sees the current in-memory state rather than a snapshot from scheduling
time. Async actions are serialized: a run starts only after the previous
one finished, so writes land in firing order.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class Debouncer:
    """
    Coalesces bursts of schedule() calls into one action run.
    """

    def __init__(
        self,
        action: Callable[[], Any],
        delay_ms: int,
        scheduler: Optional[Scheduler] = None,
        name: str = "debouncer",
    ):
        """
        Initialize Debouncer.

        Args:
            action: Callable run when the timer fires; may return an awaitable
            delay_ms: Quiet period in milliseconds
            scheduler: Timer source; defaults to the running asyncio loop
            name: Used in log messages
        """
        self._action = action
        self._delay = delay_ms / 1000
        self._scheduler = scheduler or LoopScheduler()
        self._name = name
        self._handle: Optional[TimerHandle] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def pending(self) -> bool:
        """True while a timer is armed."""
        return self._handle is not None

    def schedule(self) -> None:
        """Cancel any armed timer and re-arm it; the last call wins."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._scheduler.call_later(self._delay, self._fire)
        logger.debug(f"{self._name}: armed for {self._delay:.3f}s")

    def cancel(self) -> None:
        """Disarm the timer without running the action."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug(f"{self._name}: cancelled")

    async def flush(self) -> None:
        """Run the action now if a timer is armed, then wait for it."""
        if self._handle is None:
            await self.wait()
            return
        self.cancel()
        run = self._run()
        if run is not None:
            await run

    async def wait(self) -> None:
        """Wait for the in-flight async run, if any."""
        if self._inflight is not None and not self._inflight.done():
            await asyncio.wait([self._inflight])

    def _fire(self) -> None:
        self._handle = None
        run = self._run()
        if run is not None:
            run.add_done_callback(self._report)

    def _run(self) -> Optional[asyncio.Future]:
        result = self._action()
        if not inspect.isawaitable(result):
            return None

        previous = self._inflight

        async def _serialized(awaitable: Awaitable[Any]) -> Any:
            if previous is not None and not previous.done():
                await asyncio.wait([previous])
            return await awaitable

        self._inflight = asyncio.ensure_future(_serialized(result))
        return self._inflight

    def _report(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"{self._name}: debounced run failed: {error}")
