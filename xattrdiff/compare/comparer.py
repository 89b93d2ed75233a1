# Copyright Red Hat
#
# xattrdiff/compare/comparer.py - Extended attribute differ top-level interface
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level tree comparison interface.
"""
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional
import logging
import os
import sys

from xattrdiff import (
    EXIT_DIFFER,
    EXIT_ERROR,
    EXIT_SAME,
    XattrDiffError,
)

from .engine import MergeEngine, MergeResults
from .findings import Finding
from .options import CompareOptions
from .stream import EntryStream
from .walk import TreeWalker, WalkResult

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def print_finding(finding: Finding):
    """
    Write ``finding`` to the current standard output stream.

    Paths and attribute names that are not valid in the file system
    encoding are written as their original bytes.
    """
    line = f"{finding}\n"
    stdout_bytes = getattr(sys.stdout, "buffer", None)
    if stdout_bytes is None:
        sys.stdout.write(line)
        return
    sys.stdout.flush()
    stdout_bytes.write(os.fsencode(line))
    stdout_bytes.flush()


class CompareResults:
    """
    The outcome of comparing two trees.
    """

    def __init__(
        self,
        merge: MergeResults,
        left: Optional[WalkResult],
        right: Optional[WalkResult],
        errors: List[XattrDiffError],
    ):
        """
        Initialise a new ``CompareResults`` object.

        :param merge: The merge counters.
        :type merge: ``MergeResults``
        :param left: The left hand walk summary, or ``None`` if the walk
                     failed.
        :type left: ``Optional[WalkResult]``
        :param right: The right hand walk summary, or ``None`` if the walk
                      failed.
        :type right: ``Optional[WalkResult]``
        :param errors: Fatal errors raised by the walkers.
        :type errors: ``List[XattrDiffError]``
        """
        self.merge = merge
        self.left = left
        self.right = right
        self.errors = errors

    def __repr__(self):
        return (
            f"CompareResults(merge={self.merge!r}, left={self.left!r}, "
            f"right={self.right!r}, errors={self.errors!r})"
        )

    @property
    def differences(self) -> int:
        """
        The total number of findings reported.
        """
        return self.merge.differences

    @property
    def error_count(self) -> int:
        """
        The total number of errors: fatal walk errors, per-entry walk
        errors and an incomplete merge.
        """
        count = len(self.errors)
        count += sum(walk.errors for walk in (self.left, self.right) if walk)
        if self.merge.incomplete:
            count += 1
        return count

    @property
    def exit_status(self) -> int:
        """
        The process exit status reflecting these results.
        """
        if self.error_count:
            return EXIT_ERROR
        if self.differences:
            return EXIT_DIFFER
        return EXIT_SAME


class XattrComparer:
    """
    Top-level interface for comparing the extended attributes of two trees.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        emit: Optional[Callable[[Finding], None]] = None,
    ):
        """
        Initialise a new ``XattrComparer``.

        :param options: Options to control this ``XattrComparer`` instance.
        :type options: ``Optional[CompareOptions]``
        :param emit: A callable receiving each ``Finding`` as it is made.
                     Defaults to writing one line per finding to stdout.
        :type emit: ``Optional[Callable[[Finding], None]]``
        """
        options = options or CompareOptions()
        self.options: CompareOptions = options
        self.tree_walker: TreeWalker = TreeWalker()
        self.merge_engine: MergeEngine = MergeEngine(emit or print_finding, options)

    @staticmethod
    def _join(future: "Future[WalkResult]", errors: List[XattrDiffError]):
        """
        Return the result of a walker ``future``, recording a fatal walk
        error in ``errors``.
        """
        try:
            return future.result()
        except XattrDiffError as err:
            _log_error("%s", err)
            errors.append(err)
            return None

    def compare_roots(self, left_root: str, right_root: str) -> CompareResults:
        """
        Compare the trees beneath ``left_root`` and ``right_root``.

        Findings are passed to the ``emit`` callable while the trees are
        walked. Walk errors are reported once both walks and the merge have
        completed.

        :param left_root: The first (left hand) root to compare.
        :type left_root: ``str``
        :param right_root: The second (right hand) root to compare.
        :type right_root: ``str``
        :returns: The results of the comparison.
        :rtype: ``CompareResults``
        :raises XattrDiffPathError: If a walked path does not lie beneath its
                                    root. Both walks are cancelled and
                                    joined before the error is raised.
        """
        _log_info("comparing %s to %s", left_root, right_root)

        left_stream = EntryStream(left_root, self.options.queue_size)
        right_stream = EntryStream(right_root, self.options.queue_size)
        errors: List[XattrDiffError] = []

        with ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="xattrdiff-walk"
        ) as executor:
            left_future = executor.submit(
                self.tree_walker.supply, left_root, left_stream
            )
            right_future = executor.submit(
                self.tree_walker.supply, right_root, right_stream
            )
            try:
                merge = self.merge_engine.merge(left_stream, right_stream)
            except Exception:
                for stream in (left_stream, right_stream):
                    stream.cancel()
                    stream.drain()
                for future in (left_future, right_future):
                    self._join(future, errors)
                raise

            left = self._join(left_future, errors)
            right = self._join(right_future, errors)

        results = CompareResults(merge, left, right, errors)
        _log_debug("Comparison complete: %r", results)
        return results
