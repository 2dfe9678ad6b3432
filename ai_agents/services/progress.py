"""
Progress reporting for pipeline runs.

Two emitters share the ``ProgressEmitter`` protocol:

* ``BufferedEmitter`` keeps nothing but the terminal event; the run's return
  value carries the result (scheduled runs).
* ``StreamingEmitter`` pushes every event, encoded as a server-sent event, onto a
  queue drained by the HTTP response body (interactive runs).
"""
from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Iterator, Optional, Protocol, runtime_checkable

from ai_agents.services.models import ProgressEvent

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


def encode_event(event: ProgressEvent) -> str:
    return f"data: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"


@runtime_checkable
class ProgressEmitter(Protocol):
    @property
    def cancelled(self) -> bool:
        ...

    def emit(self, event: ProgressEvent) -> None:
        ...


class BufferedEmitter:
    """Drops intermediate events and remembers only the terminal one."""

    def __init__(self) -> None:
        self.last_event: Optional[ProgressEvent] = None

    @property
    def cancelled(self) -> bool:
        return False

    def emit(self, event: ProgressEvent) -> None:
        if event.is_terminal:
            self.last_event = event


class StreamingEmitter:
    """Queue-backed producer for a ``text/event-stream`` response.

    The producing thread calls ``emit`` and finally ``close``; the response body
    iterates ``iter_events``. ``close`` is idempotent, so the end-of-stream marker
    is enqueued exactly once. When the consumer goes away (client disconnect, or
    the body is closed before it is read) the emitter is cancelled and later
    events are dropped.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._cancelled = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def emit(self, event: ProgressEvent) -> None:
        with self._lock:
            if self._closed:
                logger.debug("Dropping %s event on closed stream", event.status.value)
                return
            self._queue.put_nowait(encode_event(event))

    def close(self) -> bool:
        """Close the channel; returns False if it was already closed."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            self._queue.put_nowait(_END_OF_STREAM)
        return True

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
        if self.close():
            logger.info("Progress stream cancelled by consumer")

    def iter_events(self) -> "EventStream":
        return EventStream(self)

    def _next_item(self) -> object:
        return self._queue.get()


class EventStream:
    """Response body over a ``StreamingEmitter``.

    WSGI servers call ``close`` on the body when the response ends or is
    dropped, including before the first chunk is read; that cancels the run
    unless the producer already finished.
    """

    def __init__(self, emitter: StreamingEmitter) -> None:
        self._emitter = emitter
        self._exhausted = False

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._exhausted:
            raise StopIteration
        item = self._emitter._next_item()
        if item is _END_OF_STREAM:
            self._exhausted = True
            raise StopIteration
        return item

    def close(self) -> None:
        self._exhausted = True
        if not self._emitter.closed:
            self._emitter.cancel()
