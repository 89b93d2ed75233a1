# Copyright Red Hat
#
# xattrdiff/compare/__init__.py - Extended attribute differ compare package
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison package.

Provides streaming comparison of the regular files and extended attributes
beneath two roots: tree walking, bounded entry streams, the merge-compare
engine and the attribute differ. The main entry points are
``XattrComparer`` and ``CompareOptions``.
"""
from .comparer import CompareResults, XattrComparer
from .engine import MergeEngine, MergeResults
from .entry import Entry
from .findings import FindingType, OnlyIn, XattrMismatch, XattrOnlyIn
from .options import CompareOptions
from .stream import EntryStream, StreamState

__all__ = [
    "CompareOptions",
    "CompareResults",
    "Entry",
    "EntryStream",
    "FindingType",
    "MergeEngine",
    "MergeResults",
    "OnlyIn",
    "StreamState",
    "XattrComparer",
    "XattrMismatch",
    "XattrOnlyIn",
]
