# Copyright Red Hat
#
# tests/compare/_util.py - Tree comparison test utilities.
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import errno
import os
from unittest.mock import patch

from xattrdiff.compare.entry import Entry
from xattrdiff.compare.stream import EntryStream


def make_stream(root, entries, aborted=False, maxsize=None):
    """
    Build a closed ``EntryStream`` for ``root`` holding ``entries``.

    Each element of ``entries`` is either a relative path or a
    ``(relative_path, xattrs)`` tuple.
    """
    maxsize = maxsize or len(entries) + 1
    stream = EntryStream(root, maxsize=maxsize)
    for item in entries:
        if isinstance(item, tuple):
            rel_path, xattrs = item
        else:
            rel_path, xattrs = item, {}
        stream.put(Entry(os.path.join(root, rel_path), xattrs))
    stream.close(aborted=aborted)
    return stream


def make_tree(root, files):
    """
    Create an empty regular file beneath ``root`` for each relative path in
    ``files``, creating parent directories as needed.
    """
    for rel_path in files:
        path = os.path.join(root, rel_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf8"):
            pass


def patch_xattrs(xattrs_by_path, list_errors=(), get_errors=()):
    """
    Return a context manager patching ``os.listxattr`` and ``os.getxattr``
    to serve attributes from ``xattrs_by_path`` (a dictionary mapping full
    paths to attribute dictionaries).

    Paths in ``list_errors`` fail ``listxattr`` with ``EACCES``. Names in
    ``get_errors`` fail ``getxattr`` with ``ENODATA``.
    """

    def _listxattr(path, follow_symlinks=True):
        if path in list_errors:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        return list(xattrs_by_path.get(path, {}).keys())

    def _getxattr(path, name, follow_symlinks=True):
        if name in get_errors:
            raise OSError(errno.ENODATA, "No data available", path)
        return xattrs_by_path[path][name]

    class _Patcher:
        def __enter__(self):
            self._list = patch("os.listxattr", side_effect=_listxattr)
            self._get = patch("os.getxattr", side_effect=_getxattr)
            self._list.start()
            self._get.start()
            return self

        def __exit__(self, *exc):
            self._get.stop()
            self._list.stop()
            return False

    return _Patcher()
