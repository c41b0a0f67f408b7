"""
Event-loop timers: trailing-edge debounce, fixed-interval polling and
one-shot delayed calls.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

AsyncCallback = Callable[[], Awaitable[Any]]


class Debouncer:
    """
    Calls `callback` once `delay` seconds after the last trigger.
    Each new trigger inside the window cancels the pending call.
    """

    def __init__(self, delay: float, callback: AsyncCallback):
        self.delay = delay
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire())

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        await self._callback()

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the current pending call (if any) to finish or be cancelled."""
        if self._task is not None:
            await asyncio.wait({self._task})


class Poller:
    """Runs `callback` immediately and then every `interval` seconds until stopped."""

    def __init__(self, interval: float, callback: AsyncCallback):
        self.interval = interval
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await self._callback()
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.wait({self._task})
        self._task = None


def run_later(delay: float, callback: AsyncCallback) -> asyncio.Task:
    """Schedule `callback` after `delay` seconds; cancel the task to abort it."""

    async def _delayed() -> None:
        await asyncio.sleep(delay)
        await callback()

    return asyncio.get_running_loop().create_task(_delayed())
