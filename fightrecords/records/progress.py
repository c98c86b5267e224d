"""Progress reporting for records calculation runs."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator

from fightrecords.core.constants import PROGRESS_CHANNEL_SIZE

logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]


class ProgressReporter:
    """Synchronous progress sink.

    Every message is kept in order, logged, and forwarded to the optional
    ``sink`` before the call returns.
    """

    def __init__(self, sink: ProgressSink | None = None) -> None:
        """Initialize the reporter."""
        self.sink = sink
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        """Record and forward a single message."""
        self.messages.append(message)
        logger.info(message)
        if self.sink is not None:
            self.sink(message)


class ProgressChannelClosed(Exception):
    """Raised on the writing side once the reader has gone away."""


class ProgressChannel:
    """Bounded queue that hands messages from a worker thread to a reader.

    A writer blocks while the queue is full. If the reader calls ``detach``
    (for example because the HTTP client disconnected), the blocked or next
    write raises ``ProgressChannelClosed`` so the worker stops.
    """

    _CLOSED = object()
    _PUT_TIMEOUT = 0.5

    def __init__(self, maxsize: int = PROGRESS_CHANNEL_SIZE) -> None:
        """Initialize the channel."""
        self._queue: queue.Queue[object] = queue.Queue(maxsize=maxsize)
        self._detached = threading.Event()

    @property
    def detached(self) -> bool:
        return self._detached.is_set()

    def _put(self, item: object) -> None:
        while not self._detached.is_set():
            try:
                self._queue.put(item, timeout=self._PUT_TIMEOUT)
                return
            except queue.Full:
                continue
        raise ProgressChannelClosed("Progress reader disconnected")

    def __call__(self, message: str) -> None:
        """Enqueue a message for the reader."""
        self._put(message)

    def close(self) -> None:
        """Signal that no more messages will arrive."""
        if self._detached.is_set():
            return
        try:
            self._put(self._CLOSED)
        except ProgressChannelClosed:
            logger.debug("Progress reader left before the channel closed")

    def detach(self) -> None:
        """Stop reading. Pending and future writes fail fast."""
        self._detached.set()

    def iter_messages(self) -> Iterator[str]:
        """Yield messages in arrival order until the channel is closed."""
        while True:
            item = self._queue.get()
            if item is self._CLOSED:
                return
            yield str(item)
