"""
Readable
========

Single-producer / single-consumer pull queue with a high-water mark.

GUARANTEES:
===========
1. FIFO: entities are read in the order they were pushed
2. At most once: every pushed entity is returned by ``read()`` once
3. No loss: nothing pushed is ever dropped by the buffer
4. Consumer-driven refill: ``_read()`` is only invoked from ``read()``,
   and at most once until the producer pushes again

Subclasses implement ``_read()`` to produce more data and call ``push()``.
"""

from __future__ import annotations
from collections import deque
from typing import Any, Callable, Deque, List, Optional
import asyncio
import logging

from ..contracts.base import (
    DataAvailable, Signal, StreamClosed, StreamFailed, StreamHubError
)

LOG = logging.getLogger(__name__)

DEFAULT_HIGH_WATER_MARK = 16

Listener = Callable[[Signal], None]


class Readable:
    """
    Backpressure buffer.

    Consumers either call ``read()`` and ``subscribe()`` for signals, or
    iterate asynchronously::

        async for content in readable:
            ...
    """

    def __init__(self, high_water_mark: int = DEFAULT_HIGH_WATER_MARK):
        if high_water_mark < 0:
            raise ValueError("high_water_mark must be >= 0")
        self._high_water_mark = high_water_mark
        self._buffer: Deque[Any] = deque()
        self._listeners: List[Listener] = []
        self._reading = False
        self._closed = False
        self._error: Optional[StreamHubError] = None
        self._error_raised = False
        self._wakeup = asyncio.Event()

    # -------------------------------------------------------------------------
    # Producer side
    # -------------------------------------------------------------------------

    def push(self, *entities: Any) -> bool:
        """
        Append entities in call order.

        Returns False once the buffer is at or above the high-water mark,
        asking the producer to pause.
        """
        if not entities:
            return self.below_high_water_mark
        if self._closed:
            LOG.debug("push of %d entities after close ignored", len(entities))
            return False
        self._buffer.extend(entities)
        self._reading = False
        self._emit(DataAvailable(count=len(entities)))
        return self.below_high_water_mark

    def _read(self) -> None:
        """Produce more data. Called by ``read()``; override in producers."""

    def _fail(self, error: StreamHubError) -> None:
        """Surface a producer failure. Only the first failure is delivered."""
        if self._error is not None:
            return
        self._error = error
        self._reading = False
        self._emit(StreamFailed(error=error))

    # -------------------------------------------------------------------------
    # Consumer side
    # -------------------------------------------------------------------------

    def read(self) -> Optional[Any]:
        """Dequeue the oldest entity, refilling when below the high-water mark."""
        content = self._buffer.popleft() if self._buffer else None
        if not self._buffer or len(self._buffer) < self._high_water_mark:
            self._maybe_refill()
        return content

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a signal listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop producing. Buffered entities stay readable."""
        if self._closed:
            return
        self._closed = True
        self._reading = False
        self._on_close()
        self._emit(StreamClosed())

    def _on_close(self) -> None:
        """Release producer resources. Override in producers."""

    def __aiter__(self) -> Readable:
        return self

    async def __anext__(self) -> Any:
        while True:
            self._wakeup.clear()
            content = self.read()
            if content is not None:
                return content
            if self._error is not None:
                if self._error_raised:
                    raise StopAsyncIteration
                self._error_raised = True
                raise self._error
            if self._closed:
                raise StopAsyncIteration
            await self._wakeup.wait()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def high_water_mark(self) -> int:
        return self._high_water_mark

    @property
    def below_high_water_mark(self) -> bool:
        return len(self._buffer) < self._high_water_mark

    @property
    def error(self) -> Optional[StreamHubError]:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._buffer)

    def _maybe_refill(self) -> None:
        if self._reading or self._closed or self._error is not None:
            return
        self._reading = True
        self._read()

    def _emit(self, signal: Signal) -> None:
        self._wakeup.set()
        for listener in list(self._listeners):
            listener(signal)
