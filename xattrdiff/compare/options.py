# Copyright Red Hat
#
# xattrdiff/compare/options.py - Extended attribute differ compare options
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison options.
"""
from dataclasses import dataclass, fields
from argparse import Namespace
from typing import Union
import logging

from xattrdiff import XattrDiffArgumentError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Default capacity of each bounded entry queue.
DEFAULT_QUEUE_SIZE = 1000

#: Default minimum number of seconds between progress status lines.
DEFAULT_STATUS_INTERVAL = 5.0


@dataclass(frozen=True)
class CompareOptions:
    """
    Tree comparison options.
    """

    #: Capacity of each producer's bounded entry queue
    queue_size: int = DEFAULT_QUEUE_SIZE
    #: Minimum interval in seconds between progress status lines
    status_interval: float = DEFAULT_STATUS_INTERVAL
    #: Emit progress status lines while comparing
    verbose: bool = False

    def __post_init__(self):
        if self.queue_size <= 0:
            raise XattrDiffArgumentError(
                f"Queue size must be greater than zero: {self.queue_size}"
            )
        if self.status_interval < 0:
            raise XattrDiffArgumentError(
                f"Status interval cannot be negative: {self.status_interval}"
            )

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Construct a new ``CompareOptions`` object from the command line
        arguments in ``cmd_args``. The ``verbose`` argument may be a count
        (``-vv``) and is converted to a boolean.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """

        def get_value(name: str) -> Union[bool, int, float]:
            attr = getattr(cmd_args, name)
            if name == "verbose":
                return bool(attr)
            return attr

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: get_value(name)
            for name in field_names
            if getattr(cmd_args, name, None) is not None
        }
        options = cls(**kwargs)
        _log_debug("Initialised CompareOptions from arguments: %s", repr(options))
        return options
