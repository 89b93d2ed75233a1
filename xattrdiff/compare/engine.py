# Copyright Red Hat
#
# xattrdiff/compare/engine.py - Extended attribute differ merge engine
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Streaming merge-compare engine.

The engine consumes two entry streams, each sorted by relative path, and
walks them in lockstep like a sorted merge join. A path seen on one side
only is reported as such; a path seen on both sides has its extended
attributes compared. Only the current entry of each side is held in memory.
"""
from typing import Callable, Optional
import logging
import time
import os

from xattrdiff import XATTRDIFF_SUBSYSTEM_MERGE, Side

from .entry import Entry, relative_path
from .findings import Finding, FindingType, OnlyIn
from .options import CompareOptions
from .stream import EntryStream, StreamState
from .xattrs import diff_xattrs

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_merge(msg, *args, **kwargs):
    """A wrapper for merge subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": XATTRDIFF_SUBSYSTEM_MERGE}, **kwargs)


class _Cursor:
    """
    The merge position in one entry stream.

    A cursor is either awaiting its next entry (``waiting``), holding an
    entry, or finished because its stream has ended.
    """

    def __init__(self, side: Side, stream: EntryStream):
        self.side = side
        self.stream = stream
        self.entry: Optional[Entry] = None
        self.rel_path: str = ""
        self.key: bytes = b""
        self.waiting = True
        self.count = 0

    @property
    def done(self) -> bool:
        return not self.waiting and self.entry is None

    @property
    def aborted(self) -> bool:
        return self.stream.state == StreamState.ABORTED

    def fill(self):
        """
        Block until this cursor holds an entry or its stream has ended.

        :raises XattrDiffPathError: If the new entry does not lie beneath
                                    this cursor's root.
        """
        if not self.waiting:
            return
        self.entry = self.stream.get()
        self.waiting = False
        if self.entry is None:
            _log_debug_merge(
                "%s stream %s (%s)",
                self.side.value,
                self.stream.state.value,
                self.stream.root,
            )
            return
        self.rel_path = relative_path(self.stream.root, self.entry.path)
        self.key = os.fsencode(self.rel_path)

    def advance(self):
        self.count += 1
        self.entry = None
        self.waiting = True


class MergeResults:
    """
    Counters describing a completed merge.
    """

    def __init__(self):
        #: Entries consumed from the left stream
        self.left_count = 0
        #: Entries consumed from the right stream
        self.right_count = 0
        #: Number of ``OnlyIn`` findings
        self.only_in = 0
        #: Number of ``XattrOnlyIn`` findings
        self.xattr_only_in = 0
        #: Number of ``XattrMismatch`` findings
        self.xattr_mismatch = 0
        #: ``True`` if a stream aborted and the comparison stopped early
        self.incomplete = False

    def __repr__(self):
        return (
            f"MergeResults(left_count={self.left_count}, "
            f"right_count={self.right_count}, only_in={self.only_in}, "
            f"xattr_only_in={self.xattr_only_in}, "
            f"xattr_mismatch={self.xattr_mismatch}, incomplete={self.incomplete})"
        )

    @property
    def differences(self) -> int:
        """
        The total number of findings.
        """
        return self.only_in + self.xattr_only_in + self.xattr_mismatch

    def count(self, finding: Finding):
        """
        Account for ``finding``.
        """
        if finding.finding_type == FindingType.ONLY_IN:
            self.only_in += 1
        elif finding.finding_type == FindingType.XATTR_ONLY_IN:
            self.xattr_only_in += 1
        else:
            self.xattr_mismatch += 1


class MergeEngine:
    """
    Core class for merge-comparing two sorted entry streams.
    """

    def __init__(
        self,
        emit: Callable[[Finding], None],
        options: Optional[CompareOptions] = None,
    ):
        """
        Initialise a new ``MergeEngine``.

        :param emit: A callable receiving each ``Finding`` in order.
        :type emit: ``Callable[[Finding], None]``
        :param options: Options controlling progress reporting.
        :type options: ``Optional[CompareOptions]``
        """
        self.emit = emit
        self.options = options or CompareOptions()
        self._last_status: Optional[float] = None

    def _emit(self, finding: Finding, results: MergeResults):
        results.count(finding)
        self.emit(finding)

    def _status(self, left: _Cursor, right: _Cursor):
        """
        Log a progress line if verbose and the status interval has elapsed.
        """
        if not self.options.verbose:
            return
        now = time.monotonic()
        if (
            self._last_status is not None
            and now - self._last_status <= self.options.status_interval
        ):
            return
        self._last_status = now
        _log_info(
            "left: %d processed, %d/%d queued, right: %d processed, %d/%d queued",
            left.count,
            left.stream.qsize(),
            left.stream.maxsize,
            right.count,
            right.stream.qsize(),
            right.stream.maxsize,
        )

    def _abandon(self, aborted: _Cursor, other: _Cursor, results: MergeResults):
        """
        Stop classifying after ``aborted``'s stream ended early and discard
        the remaining entries of ``other`` so its producer can finish.
        """
        results.incomplete = True
        skipped = 0 if other.done else 1
        skipped += other.stream.drain()
        _log_error(
            "Comparison incomplete: walk of %s aborted; %d entries from %s not "
            "compared",
            aborted.stream.root,
            skipped,
            other.stream.root,
        )

    def merge(
        self, left_stream: EntryStream, right_stream: EntryStream
    ) -> MergeResults:
        """
        Merge-compare two entry streams until both have ended.

        :param left_stream: The left hand entry stream.
        :type left_stream: ``EntryStream``
        :param right_stream: The right hand entry stream.
        :type right_stream: ``EntryStream``
        :returns: Counters describing the merge.
        :rtype: ``MergeResults``
        :raises XattrDiffPathError: If an entry does not lie beneath its
                                    stream's root.
        """
        left = _Cursor(Side.LEFT, left_stream)
        right = _Cursor(Side.RIGHT, right_stream)
        results = MergeResults()

        _log_debug_merge("Merging %s and %s", left_stream.root, right_stream.root)

        while True:
            left.fill()
            right.fill()

            if left.aborted:
                self._abandon(left, right, results)
                break
            if right.aborted:
                self._abandon(right, left, results)
                break

            if left.done and right.done:
                break

            self._status(left, right)

            if left.done:
                self._emit(
                    OnlyIn(Side.RIGHT, right.stream.root, right.rel_path), results
                )
                right.advance()
            elif right.done:
                self._emit(
                    OnlyIn(Side.LEFT, left.stream.root, left.rel_path), results
                )
                left.advance()
            elif left.key < right.key:
                self._emit(
                    OnlyIn(Side.LEFT, left.stream.root, left.rel_path), results
                )
                left.advance()
            elif left.key > right.key:
                self._emit(
                    OnlyIn(Side.RIGHT, right.stream.root, right.rel_path), results
                )
                right.advance()
            else:
                _log_debug_merge("Comparing extended attributes for %s", left.rel_path)
                for finding in diff_xattrs(
                    left.entry.xattrs,
                    right.entry.xattrs,
                    left.rel_path,
                    right.rel_path,
                    left.entry.path,
                    right.entry.path,
                ):
                    self._emit(finding, results)
                left.advance()
                right.advance()

        results.left_count = left.count
        results.right_count = right.count
        _log_debug_merge("Merge complete: %r", results)
        return results
