"""One-shot broadcast signals for shutdown and completion."""

from __future__ import annotations

import asyncio


class Signal:
    """Level-triggered signal that can be fired once and awaited by many.

    Once fired it stays set, so a waiter that arrives late still observes it.
    Firing again is a no-op.

    Example:
        >>> shutdown = Signal("shutdown")
        >>> if await shutdown.wait_for(5.0):
        ...     return  # shut down while waiting
    """

    def __init__(self, name: str = "signal"):
        self.name = name
        self._event = asyncio.Event()

    def fire(self) -> bool:
        """Set the signal. Returns True only for the call that set it."""
        if self._event.is_set():
            return False
        self._event.set()
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    async def wait_for(self, timeout: float) -> bool:
        """Wait up to `timeout` seconds; True if the signal fired first."""
        if self._event.is_set():
            return True
        if timeout <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except TimeoutError:
            return False
        return True

    def __repr__(self) -> str:
        state = "set" if self.is_set() else "clear"
        return f"<Signal({self.name}, {state})>"
