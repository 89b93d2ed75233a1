# Copyright Red Hat
#
# xattrdiff/compare/xattrs.py - Extended attribute differ attribute comparison
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Extended attribute map comparison.
"""
from typing import Dict, List
import logging

from xattrdiff import XATTRDIFF_SUBSYSTEM_MERGE, Side

from .findings import Finding, XattrMismatch, XattrOnlyIn

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_merge(msg, *args, **kwargs):
    """A wrapper for merge subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": XATTRDIFF_SUBSYSTEM_MERGE}, **kwargs)


# pylint: disable=too-many-arguments,too-many-positional-arguments
def diff_xattrs(
    left_xattrs: Dict[str, bytes],
    right_xattrs: Dict[str, bytes],
    left_path: str,
    right_path: str,
    left_full_path: str,
    right_full_path: str,
) -> List[Finding]:
    """
    Compute the symmetric difference of two extended attribute maps.

    Names are visited in sorted order: names from ``left_xattrs`` first
    (mismatched or left-only), followed by right-only names. Values are
    compared byte for byte. Neither map is modified.

    :param left_xattrs: The left hand attribute map.
    :type left_xattrs: ``Dict[str, bytes]``
    :param right_xattrs: The right hand attribute map.
    :type right_xattrs: ``Dict[str, bytes]``
    :param left_path: The left hand relative path.
    :type left_path: ``str``
    :param right_path: The right hand relative path.
    :type right_path: ``str``
    :param left_full_path: The left hand path as walked.
    :type left_full_path: ``str``
    :param right_full_path: The right hand path as walked.
    :type right_full_path: ``str``
    :returns: A list of findings, empty if the maps are equal.
    :rtype: ``List[Finding]``
    """
    findings: List[Finding] = []

    for name in sorted(left_xattrs):
        if name not in right_xattrs:
            findings.append(XattrOnlyIn(Side.LEFT, left_path, left_full_path, name))
        elif bytes(left_xattrs[name] or b"") != bytes(right_xattrs[name] or b""):
            findings.append(XattrMismatch(left_path, right_path, name))

    for name in sorted(right_xattrs.keys() - left_xattrs.keys()):
        findings.append(XattrOnlyIn(Side.RIGHT, right_path, right_full_path, name))

    if findings:
        _log_debug_merge(
            "Found %d extended attribute differences for %s",
            len(findings),
            left_path,
        )
    return findings
