# Copyright Red Hat
#
# xattrdiff/compare/entry.py - Extended attribute differ tree entries
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree entry representation and path relativization.
"""
from typing import Dict
import os

from xattrdiff import XattrDiffPathError


def relative_path(root: str, path: str) -> str:
    """
    Return ``path`` relative to ``root``.

    The root is compared in normalised form so that a trailing separator
    or redundant components in ``root`` do not matter.

    :param root: The root directory that ``path`` was found under.
    :type root: ``str``
    :param path: The path as walked.
    :type path: ``str``
    :returns: The path with the root prefix removed.
    :rtype: ``str``
    :raises XattrDiffPathError: If ``path`` does not lie strictly beneath
                                ``root``.
    """
    norm_root = os.path.normpath(root)
    prefix = norm_root if norm_root.endswith(os.sep) else norm_root + os.sep
    if not path.startswith(prefix) or path == prefix:
        raise XattrDiffPathError(root, path)
    return path[len(prefix):]


class Entry:
    """
    Representation of a single regular file and its extended attributes.
    """

    __slots__ = ("path", "xattrs")

    def __init__(self, path: str, xattrs: Dict[str, bytes]):
        """
        Initialise a new ``Entry`` object.

        :param path: The path of the file as walked, including its root.
        :type path: ``str``
        :param xattrs: Extended attribute name to value mappings.
        :type xattrs: ``Dict[str, bytes]``
        """
        #: The full path as walked
        self.path: str = path
        #: Extended attributes as ``Dict[str, bytes]``
        self.xattrs: Dict[str, bytes] = xattrs

    def __repr__(self):
        return f"Entry({self.path!r}, {self.xattrs!r})"
