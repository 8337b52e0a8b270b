"""
Rest countdown tickers.

A ticker is the only time-driven piece of the engine. The session hands it a
callback when a rest countdown runs and cancels it whenever the countdown
stops, so at most one callback is ever registered.
"""

from typing import Callable, Optional, Protocol


class Ticker(Protocol):
    """One-second interval capability injected into a session."""

    def start(self, callback: Callable[[], None]) -> None:
        ...

    def cancel(self) -> None:
        ...

    @property
    def active(self) -> bool:
        ...


class CooperativeTicker:
    """
    Caller-driven ticker.

    Nothing runs in the background: whoever owns the loop (the CLI, a test)
    calls tick() once per elapsed second.
    """

    def __init__(self):
        self._callback: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def tick(self) -> bool:
        """Fire the callback once. Returns whether the ticker is still running."""
        if self._callback is None:
            return False
        self._callback()
        return self.active
