"""Debounced trigger that coalesces bursts of changes into one action."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_QUIET_INTERVAL = 0.5


class DebounceState(str, Enum):
    """States of the single pending-timer slot."""

    IDLE = "idle"
    PENDING = "pending"


class DebouncedQueryTrigger(Generic[T]):
    """Runs an async action once per quiet period, with the latest value.

    Each ``notify()`` restarts the timer. When ``quiet_interval`` seconds
    pass without another change, the action runs once with the most recent
    value. ``close()`` cancels a pending timer; actions that already started
    are left to finish.

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        action: Callable[[T], Awaitable[None]],
        quiet_interval: float = DEFAULT_QUIET_INTERVAL,
    ) -> None:
        """Initialize the trigger.

        Args:
            action: Coroutine function receiving the latest value
            quiet_interval: Seconds of inactivity before the action fires
        """
        if quiet_interval < 0:
            raise ValueError("quiet_interval must be non-negative")
        self.action = action
        self.quiet_interval = quiet_interval
        self._timer: asyncio.TimerHandle | None = None
        self._latest: T | None = None
        self._running: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def state(self) -> DebounceState:
        return DebounceState.PENDING if self._timer is not None else DebounceState.IDLE

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self, value: T) -> None:
        """Record a change and restart the quiet-period timer."""
        if self._closed:
            logger.debug("Ignoring change on a closed debounced trigger")
            return

        self._latest = value
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_interval, self._fire)

    def _fire(self) -> None:
        self._timer = None
        value = self._latest
        task = asyncio.ensure_future(self._run(value))  # type: ignore[arg-type]
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, value: T) -> None:
        try:
            await self.action(value)
        except Exception:
            # Fired in the background; nothing awaits the task to re-raise it
            logger.exception("Debounced action failed")

    def close(self) -> None:
        """Cancel a pending timer and ignore further changes."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def join(self) -> None:
        """Wait for actions that have already fired to finish."""
        while self._running:
            await asyncio.gather(*self._running)
