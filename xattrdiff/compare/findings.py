# Copyright Red Hat
#
# xattrdiff/compare/findings.py - Extended attribute differ findings
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Classification events emitted by the merge engine and attribute differ.
"""
from typing import Any, Dict, Optional
from enum import Enum

from xattrdiff import Side


class FindingType(Enum):
    """
    Enum for different finding types.
    """

    ONLY_IN = "only_in"
    XATTR_ONLY_IN = "xattr_only_in"
    XATTR_MISMATCH = "xattr_mismatch"


class Finding:
    """
    Base class for a single reported difference.
    """

    finding_type: FindingType

    def __init__(self, path: str, side: Optional[Side] = None):
        """
        Initialise a new ``Finding``.

        :param path: The relative path this finding concerns.
        :type path: ``str``
        :param side: The side the finding belongs to, if any.
        :type side: ``Optional[Side]``
        """
        #: The path relative to its root
        self.path = path
        #: The side this finding belongs to or ``None`` for both
        self.side = side

    def __eq__(self, other):
        if not isinstance(other, Finding):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(sorted(self.to_dict().items())))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.to_dict()!r})"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Finding`` into a dictionary representation suitable
        for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "finding_type": self.finding_type.value,
            "path": self.path,
            "side": self.side.value if self.side else None,
        }


class OnlyIn(Finding):
    """
    A regular file present under one root only.
    """

    finding_type = FindingType.ONLY_IN

    def __init__(self, side: Side, root: str, path: str):
        super().__init__(path, side)
        #: The root directory as given by the caller
        self.root = root

    def __str__(self):
        return f"only in {self.root}: {self.path}"

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["root"] = self.root
        return out


class XattrOnlyIn(Finding):
    """
    An extended attribute present on one side of a matched file pair only.
    """

    finding_type = FindingType.XATTR_ONLY_IN

    def __init__(self, side: Side, path: str, full_path: str, name: str):
        super().__init__(path, side)
        #: The path of the file as walked
        self.full_path = full_path
        #: The extended attribute name
        self.name = name

    def __str__(self):
        return f"xattr only in {self.full_path}: {self.name}"

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["full_path"] = self.full_path
        out["name"] = self.name
        return out


class XattrMismatch(Finding):
    """
    An extended attribute whose value differs between a matched file pair.
    """

    finding_type = FindingType.XATTR_MISMATCH

    def __init__(self, path: str, other_path: str, name: str):
        super().__init__(path)
        #: The right hand relative path
        self.other_path = other_path
        #: The extended attribute name
        self.name = name

    def __str__(self):
        return f"{self.path} {self.other_path} differ: {self.name}"

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["other_path"] = self.other_path
        out["name"] = self.name
        return out
