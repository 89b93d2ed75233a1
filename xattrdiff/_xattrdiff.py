# Copyright Red Hat
#
# xattrdiff/_xattrdiff.py - Extended attribute differ global definitions
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level xattrdiff package.
"""
from enum import Enum
import logging

_log = logging.getLogger("xattrdiff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Xattrdiff debugging subsystem mask
XATTRDIFF_DEBUG_WALK = 1
XATTRDIFF_DEBUG_MERGE = 2
XATTRDIFF_DEBUG_COMMAND = 4
XATTRDIFF_DEBUG_ALL = (
    XATTRDIFF_DEBUG_WALK | XATTRDIFF_DEBUG_MERGE | XATTRDIFF_DEBUG_COMMAND
)

# Xattrdiff debugging subsystem names
XATTRDIFF_SUBSYSTEM_WALK = "xattrdiff.walk"
XATTRDIFF_SUBSYSTEM_MERGE = "xattrdiff.merge"
XATTRDIFF_SUBSYSTEM_COMMAND = "xattrdiff.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    XATTRDIFF_DEBUG_WALK: XATTRDIFF_SUBSYSTEM_WALK,
    XATTRDIFF_DEBUG_MERGE: XATTRDIFF_SUBSYSTEM_MERGE,
    XATTRDIFF_DEBUG_COMMAND: XATTRDIFF_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#: Exit status: the trees are attribute-identical and no errors occurred.
EXIT_SAME = 0
#: Exit status: at least one difference was found.
EXIT_DIFFER = 1
#: Exit status: an error occurred (takes precedence over ``EXIT_DIFFER``).
EXIT_ERROR = 2


class Side(Enum):
    """
    Enum identifying one of the two trees being compared.
    """

    LEFT = "left"
    RIGHT = "right"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


class DiagnosticFormatter(logging.Formatter):
    """
    Render log records as ``<level>: <message>`` with a lower case level
    name, e.g. ``error: [Errno 2] No such file or directory: '/x'``.
    """

    def __init__(self):
        super().__init__("%(levelname)s: %(message)s")

    def format(self, record):
        msg = super().format(record)
        return record.levelname.lower() + msg[len(record.levelname):]


def set_debug_mask(mask):
    """
    Set the debug mask for the ``xattrdiff`` package.

    :param mask: the logical OR of the ``XATTRDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > XATTRDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid xattrdiff debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    xattrdiff_log = logging.getLogger("xattrdiff")
    for handler in xattrdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Xattrdiff exception types
#


class XattrDiffError(Exception):
    """
    Base class for extended attribute differ errors.
    """


class XattrDiffArgumentError(XattrDiffError):
    """
    An invalid argument was passed to an xattrdiff API call or on the
    command line.
    """


class XattrDiffRootError(XattrDiffError):
    """
    A comparison root is missing, is not a directory, or cannot be read.
    """

    def __init__(self, root: str, reason: str):
        """
        Initialise a new ``XattrDiffRootError`` exception.

        :param root: The root path that could not be walked.
        :param reason: A description of the failure.
        """
        self.root, self.reason = root, reason
        super().__init__(f"Cannot walk {root}: {reason}")


class XattrDiffPathError(XattrDiffError):
    """
    A walked path does not lie beneath the root it was reported for.
    """

    def __init__(self, root: str, path: str):
        """
        Initialise a new ``XattrDiffPathError`` exception.

        :param root: The root the path was reported for.
        :param path: The path that could not be made relative.
        """
        self.root, self.path = root, path
        super().__init__(f"Path {path} is not beneath {root}")


__all__ = [
    "XATTRDIFF_DEBUG_WALK",
    "XATTRDIFF_DEBUG_MERGE",
    "XATTRDIFF_DEBUG_COMMAND",
    "XATTRDIFF_DEBUG_ALL",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "XATTRDIFF_SUBSYSTEM_WALK",
    "XATTRDIFF_SUBSYSTEM_MERGE",
    "XATTRDIFF_SUBSYSTEM_COMMAND",
    "set_debug_mask",
    "DiagnosticFormatter",
    # Exit status values
    "EXIT_SAME",
    "EXIT_DIFFER",
    "EXIT_ERROR",
    "Side",
    "XattrDiffError",
    "XattrDiffArgumentError",
    "XattrDiffRootError",
    "XattrDiffPathError",
]
