"""Debounced values driven by the event loop's timer."""
import asyncio
from typing import Any, Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class Debouncer:
    """
    Follows a rapidly changing input, updating only once it has been stable.

    Each push cancels the pending update and starts a new timer, so a
    superseded input can never be applied.
    """

    def __init__(
        self,
        callback: Optional[Callable[[Any], None]] = None,
        delay_ms: int = 300,
        initial: Any = "",
        scheduler: Optional[Scheduler] = None
    ):
        """
        Initialize the debouncer.

        Args:
            callback: Called with the new value each time it settles
            delay_ms: Quiet period in milliseconds
            initial: Initial settled value
            scheduler: Object with call_later (defaults to the running event loop)
        """
        self.callback = callback
        self.delay_ms = delay_ms
        self.value = initial
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._pending: Any = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, raw: Any) -> None:
        """Record a new raw input and restart the quiet period."""
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._pending = raw
        self._handle = scheduler.call_later(self.delay_ms / 1000, self._fire)

    def cancel(self) -> None:
        """Drop the pending update, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._pending = None

    def flush(self) -> None:
        """Apply the pending update immediately."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def _fire(self) -> None:
        raw = self._pending
        self._handle = None
        self._pending = None
        if raw == self.value:
            return
        self.value = raw
        if self.callback is not None:
            self.callback(raw)

    def reset(self, value: Any = "") -> None:
        """Cancel any pending update and set the settled value directly."""
        self.cancel()
        self.value = value
