# Copyright Red Hat
#
# xattrdiff/compare/walk.py - Extended attribute differ tree walk
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree walking support for xattrdiff.

``TreeWalker`` produces the regular files beneath a root, each with its
extended attribute map, in strictly ascending byte-wise order of the path
relative to the root. Errors below the root are logged and counted but never
stop the walk.
"""
from typing import Dict, Iterator, List, Tuple
import logging
import errno
import stat
import os

from xattrdiff import XATTRDIFF_SUBSYSTEM_WALK, XattrDiffRootError

from .entry import Entry
from .stream import EntryStream

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_walk(msg, *args, **kwargs):
    """A wrapper for walk subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": XATTRDIFF_SUBSYSTEM_WALK}, **kwargs)


class WalkResult:
    """
    Outcome of walking one root into an ``EntryStream``.
    """

    def __init__(self, root: str):
        """
        Initialise a new ``WalkResult``.

        :param root: The root directory walked.
        :type root: ``str``
        """
        self.root = root
        #: Number of entries emitted
        self.entries = 0
        #: Number of per-entry traversal and attribute errors
        self.errors = 0

    def __repr__(self):
        return (
            f"WalkResult(root={self.root!r}, entries={self.entries}, "
            f"errors={self.errors})"
        )


def read_xattrs(path: str, result: WalkResult) -> Dict[str, bytes]:
    """
    Retrieve all extended attributes of ``path``.

    A file system without extended attribute support gives an empty map.
    A failure to list attributes is logged and gives an empty map. A
    failure to read one attribute is logged and stores an empty value for
    that name.

    :param path: The file to examine.
    :type path: ``str``
    :param result: The walk result used to count errors.
    :type result: ``WalkResult``
    :returns: A dictionary mapping attribute names to values.
    :rtype: ``Dict[str, bytes]``
    """
    try:
        names = os.listxattr(path, follow_symlinks=False)
    except OSError as err:
        if err.errno == errno.ENOTSUP:
            _log_debug_walk("Extended attributes not supported for %s", path)
            return {}
        _log_error("%s", err)
        result.errors += 1
        return {}

    xattrs = {}
    for name in names:
        try:
            xattrs[name] = os.getxattr(path, name, follow_symlinks=False)
        except OSError as err:
            _log_error("Could not read extended attribute %s: %s", name, err)
            result.errors += 1
            xattrs[name] = b""
    return xattrs


def _sort_key(name: str, is_dir: bool) -> bytes:
    """
    Return the byte string ordering a directory child among its siblings.

    A directory sorts by its name plus a trailing separator so that its
    descendants, which are emitted in its place, keep the global byte-wise
    order of relative paths (``a.txt`` sorts before ``a/b``).
    """
    return os.fsencode(name + os.sep if is_dir else name)


class TreeWalker:
    """
    Streaming file system tree walker for extended attribute comparisons.
    """

    @staticmethod
    def _check_root(root: str):
        """
        Verify that ``root`` is a directory that can be walked.

        :raises XattrDiffRootError: If ``root`` does not exist or is not a
                                    directory.
        """
        try:
            root_stat = os.stat(root)
        except OSError as err:
            raise XattrDiffRootError(root, err.strerror or str(err)) from err
        if not stat.S_ISDIR(root_stat.st_mode):
            raise XattrDiffRootError(root, "Not a directory")

    def _scan_dir(
        self, dir_path: str, result: WalkResult
    ) -> List[Tuple[bytes, os.DirEntry]]:
        """
        Return the children of ``dir_path`` in walk order.

        :param dir_path: The directory to scan.
        :type dir_path: ``str``
        :param result: The walk result used to count errors.
        :type result: ``WalkResult``
        :returns: A sorted list of ``(sort_key, DirEntry)`` tuples.
        :rtype: ``List[Tuple[bytes, os.DirEntry]]``
        """
        children = []
        with os.scandir(dir_path) as it:
            for dirent in it:
                try:
                    is_dir = dirent.is_dir(follow_symlinks=False)
                except OSError as err:
                    _log_error("%s", err)
                    result.errors += 1
                    continue
                children.append((_sort_key(dirent.name, is_dir), dirent))
        children.sort(key=lambda child: child[0])
        return children

    def walk(self, root: str, result: WalkResult) -> Iterator[Entry]:
        """
        Walk the tree beneath ``root`` and yield an ``Entry`` for each
        regular file found, in ascending byte-wise relative path order.

        :param root: The root directory to walk.
        :type root: ``str``
        :param result: The walk result used to count entries and errors.
        :type result: ``WalkResult``
        :returns: An iterator over ``Entry`` objects.
        :rtype: ``Iterator[Entry]``
        :raises XattrDiffRootError: If ``root`` cannot be walked.
        """
        start = os.path.normpath(root)
        self._check_root(start)

        _log_info("Walking %s", start)

        try:
            stack = [iter(self._scan_dir(start, result))]
        except OSError as err:
            raise XattrDiffRootError(root, err.strerror or str(err)) from err

        while stack:
            try:
                _, dirent = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue

            try:
                if dirent.is_dir(follow_symlinks=False):
                    _log_debug_walk("Descending into %s", dirent.path)
                    try:
                        stack.append(iter(self._scan_dir(dirent.path, result)))
                    except OSError as err:
                        _log_error("%s", err)
                        result.errors += 1
                    continue
                if not dirent.is_file(follow_symlinks=False):
                    _log_debug_walk("Skipping non-regular file %s", dirent.path)
                    continue
            except OSError as err:
                _log_error("%s", err)
                result.errors += 1
                continue

            xattrs = read_xattrs(dirent.path, result)
            _log_debug_walk(
                "Found %s with %d extended attributes", dirent.path, len(xattrs)
            )
            result.entries += 1
            yield Entry(dirent.path, xattrs)

    def supply(self, root: str, stream: EntryStream) -> WalkResult:
        """
        Walk ``root`` into ``stream``, closing the stream when done.

        A root that cannot be walked closes the stream as exhausted since
        there are no entries on that side. Any other unexpected failure
        closes the stream as aborted.

        :param root: The root directory to walk.
        :type root: ``str``
        :param stream: The stream to feed.
        :type stream: ``EntryStream``
        :returns: A summary of the walk.
        :rtype: ``WalkResult``
        :raises XattrDiffRootError: If ``root`` cannot be walked.
        """
        result = WalkResult(root)
        completed = False
        try:
            for entry in self.walk(root, result):
                if not stream.put(entry):
                    _log_debug_walk("Stream for %s cancelled", root)
                    break
            completed = True
        except XattrDiffRootError:
            completed = True
            raise
        finally:
            stream.close(aborted=not completed)

        _log_info(
            "Walked %s: %d entries, %d errors", root, result.entries, result.errors
        )
        return result
