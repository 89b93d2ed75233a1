# Copyright Red Hat
#
# xattrdiff/compare/stream.py - Extended attribute differ entry streams
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Bounded, closable entry streams connecting tree walkers to the merge engine.

Each stream has exactly one producer and one consumer. The producer blocks
in ``put()`` while the queue is full and the consumer blocks in ``get()``
while it is empty; neither side ever polls. End of stream is signalled by a
marker object queued after the last entry, which records whether the
producer finished normally or aborted.
"""
from typing import Optional
from enum import Enum
from queue import Queue
import threading
import logging

from xattrdiff import XATTRDIFF_SUBSYSTEM_MERGE

from .entry import Entry
from .options import DEFAULT_QUEUE_SIZE

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_merge(msg, *args, **kwargs):
    """A wrapper for merge subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": XATTRDIFF_SUBSYSTEM_MERGE}, **kwargs)


class StreamState(Enum):
    """
    Enum representing the consumer's view of an ``EntryStream``.
    """

    OPEN = "open"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


class _StreamEnd:
    """
    End of stream marker.
    """

    __slots__ = ("aborted",)

    def __init__(self, aborted: bool):
        self.aborted = aborted


class EntryStream:
    """
    A bounded queue of ``Entry`` objects produced by walking one root.
    """

    def __init__(self, root: str, maxsize: int = DEFAULT_QUEUE_SIZE):
        """
        Initialise a new ``EntryStream``.

        :param root: The root directory this stream's entries are found under.
        :type root: ``str``
        :param maxsize: The queue capacity.
        :type maxsize: ``int``
        """
        self.root: str = root
        self.maxsize: int = maxsize
        self.state: StreamState = StreamState.OPEN
        self._queue: "Queue[object]" = Queue(maxsize=maxsize)
        self._cancelled = threading.Event()
        self._closed = False

    def __repr__(self):
        return (
            f"EntryStream(root={self.root!r}, maxsize={self.maxsize}, "
            f"state={self.state.value})"
        )

    @property
    def cancelled(self) -> bool:
        """
        ``True`` if the consumer has cancelled this stream.
        """
        return self._cancelled.is_set()

    def qsize(self) -> int:
        """
        Return the approximate number of queued entries.
        """
        return self._queue.qsize()

    def put(self, entry: Entry) -> bool:
        """
        Queue ``entry``, blocking while the stream is full.

        :param entry: The entry to queue.
        :type entry: ``Entry``
        :returns: ``False`` if the stream has been cancelled and the entry
                  was discarded, ``True`` otherwise.
        :rtype: ``bool``
        """
        if self._closed:
            raise ValueError(f"put() on closed stream for {self.root}")
        if self._cancelled.is_set():
            return False
        self._queue.put(entry)
        return True

    def close(self, aborted: bool = False):
        """
        Signal end of stream. Must be called exactly once by the producer.

        :param aborted: ``True`` if the producer stopped before completing
                        its walk.
        :type aborted: ``bool``
        """
        if self._closed:
            return
        self._closed = True
        _log_debug_merge(
            "Closing stream for %s (%s)", self.root, "aborted" if aborted else "done"
        )
        self._queue.put(_StreamEnd(aborted))

    def get(self) -> Optional[Entry]:
        """
        Return the next entry, blocking until one is available.

        :returns: The next ``Entry`` or ``None`` at end of stream, in which
                  case ``state`` reports how the stream ended.
        :rtype: ``Optional[Entry]``
        """
        if self.state != StreamState.OPEN:
            return None
        item = self._queue.get()
        if isinstance(item, _StreamEnd):
            self.state = StreamState.ABORTED if item.aborted else StreamState.EXHAUSTED
            return None
        return item

    def cancel(self):
        """
        Ask the producer to stop. The consumer must then ``drain()`` the
        stream so that a producer blocked in ``put()`` can observe the
        request and close.
        """
        _log_debug_merge("Cancelling stream for %s", self.root)
        self._cancelled.set()

    def drain(self) -> int:
        """
        Discard entries until end of stream.

        :returns: The number of entries discarded.
        :rtype: ``int``
        """
        count = 0
        while self.get() is not None:
            count += 1
        return count
