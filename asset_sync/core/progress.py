"""
Progress reporting for sync passes.

A pass emits ProgressEvent records through a ProgressReporter. Consumers either
pass a plain callback or iterate a ProgressChannel.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

ProgressCallback = Callable[[str, float, Optional[str]], None]


@dataclass(frozen=True)
class ProgressEvent:
    """One progress record: status text, fraction in [0, 1], item being worked on."""
    status: str
    progress: float
    current_item: Optional[str] = None


class ProgressReporter:
    """
    Forwards progress to a callback, keeping the fraction non-decreasing.

    Callbacks run synchronously between steps of the pass.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.last_progress = 0.0
        self.events_sent = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def report(self, status: str, progress: float, current_item: Optional[str] = None):
        """Emit an event. Fractions below the last one are raised to it."""
        if self._closed:
            return
        progress = min(1.0, max(self.last_progress, progress))
        self.last_progress = progress
        self.events_sent += 1
        if self.callback:
            self.callback(status, progress, current_item)

    def close(self):
        """Stop forwarding events."""
        self._closed = True


class ProgressChannel:
    """
    Async iterator over ProgressEvents.

    The producer calls send() and then close(); iteration ends after close,
    and re-raises the producer's error if it closed with one.
    """

    _DONE = object()

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._error: Optional[BaseException] = None
        self._closed = False

    def send(self, status: str, progress: float, current_item: Optional[str] = None):
        if not self._closed:
            self._queue.put_nowait(ProgressEvent(status, progress, current_item))

    def close(self, error: Optional[BaseException] = None):
        if self._closed:
            return
        self._closed = True
        self._error = error
        self._queue.put_nowait(self._DONE)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ProgressEvent:
        item = await self._queue.get()
        if item is self._DONE:
            self._queue.put_nowait(self._DONE)
            if self._error is not None:
                error, self._error = self._error, None
                raise error
            raise StopAsyncIteration
        return item
