"""Debounce utility for coalescing rapid triggers on an asyncio loop."""

import asyncio
from typing import Awaitable, Callable


class Debouncer:
    """
    Run an async callback once after `interval` seconds of quiet.

    Each `trigger()` restarts the countdown. Calls never overlap: a call
    that fires while the previous one is still running waits for it first.
    Must be used from code running on the event loop.
    """

    def __init__(self, interval: float, callback: Callable[[], Awaitable[None]]):
        self.interval = interval
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._running: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but not yet started."""
        return self._handle is not None

    def trigger(self) -> None:
        """(Re)start the countdown."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.interval, self._start)

    def cancel(self) -> None:
        """Drop a scheduled call. A call already running is left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run a scheduled call now and wait for the latest call to finish."""
        if self._handle is not None:
            self._handle.cancel()
            self._start()
        if self._running is not None and not self._running.done():
            await self._running

    def _start(self) -> None:
        self._handle = None
        previous = self._running
        self._running = asyncio.get_running_loop().create_task(self._run(previous))

    async def _run(self, previous: asyncio.Task | None) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        await self.callback()
