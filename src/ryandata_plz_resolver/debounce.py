"""Debounce barrier for rapidly changing field values."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Optional


class Debouncer:
    """Emits a value only after it has stopped changing for ``delay`` seconds.

    ``on_settle`` is called with the settled value, and only when it
    differs from the previously settled value. Must be used from a
    running event loop.
    """

    def __init__(self, delay: float, on_settle: Callable[[str], None], initial: str = "") -> None:
        self._delay = delay
        self._on_settle = on_settle
        self._value = initial
        self._pending: Optional[str] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def value(self) -> str:
        """The last settled value."""
        return self._value

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, value: str) -> None:
        """Restart the quiet period with a new candidate value."""
        self.cancel()
        self._pending = value
        self._task = asyncio.get_running_loop().create_task(self._wait(value))

    def flush(self) -> None:
        """Settle the pending value immediately, if there is one."""
        if not self.pending:
            return
        value = self._pending
        self.cancel()
        if value is not None:
            self._settle(value)

    def cancel(self) -> None:
        """Drop the pending value without settling it."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._pending = None

    async def wait(self) -> None:
        """Wait until no value is pending."""
        while True:
            task = self._task
            if task is None or task.done():
                return
            await asyncio.wait({task})

    async def _wait(self, value: str) -> None:
        await asyncio.sleep(self._delay)
        self._task = None
        self._pending = None
        self._settle(value)

    def _settle(self, value: str) -> None:
        if value == self._value:
            return
        self._value = value
        self._on_settle(value)
