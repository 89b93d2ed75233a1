# Copyright Red Hat
#
# xattrdiff/command.py - Extended attribute differ command interface
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``xattrdiff.command`` module provides the xattrdiff command line
interface infrastructure, and a simple procedural interface to the
``xattrdiff`` library modules.
"""
from argparse import ArgumentParser
from os.path import basename
import logging

from xattrdiff import (
    EXIT_ERROR,
    XATTRDIFF_DEBUG_WALK,
    XATTRDIFF_DEBUG_MERGE,
    XATTRDIFF_DEBUG_COMMAND,
    XATTRDIFF_DEBUG_ALL,
    XATTRDIFF_SUBSYSTEM_COMMAND,
    DiagnosticFormatter,
    SubsystemFilter,
    XattrDiffError,
    set_debug_mask,
    __version__,
)
from .compare import CompareOptions, CompareResults, XattrComparer

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": XATTRDIFF_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def compare_trees(left_root, right_root, options=None) -> CompareResults:
    """
    Compare the regular files and extended attributes beneath
    ``left_root`` and ``right_root``, writing findings to stdout.

    :param left_root: The left hand root directory.
    :param right_root: The right hand root directory.
    :param options: Optional ``CompareOptions`` for the comparison.
    :returns: The comparison results.
    :rtype: ``CompareResults``
    """
    comparer = XattrComparer(options)
    return comparer.compare_roots(left_root, right_root)


def _compare_cmd(cmd_args):
    """
    Compare command handler.

    :param cmd_args: Command line arguments for the command.
    :returns: integer status code returned from ``main()``
    """
    if cmd_args.left is None or cmd_args.right is None:
        _log_error("must provide two directories to compare")
        return EXIT_ERROR

    options = CompareOptions.from_cmd_args(cmd_args)
    _log_debug_command("Effective compare options:\n%s", options)

    results = compare_trees(cmd_args.left, cmd_args.right, options=options)

    _log_info(
        "Found %d differences and %d errors", results.differences, results.error_count
    )
    return results.exit_status


def setup_logging(cmd_args):
    """
    Set up xattrdiff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    xattrdiff_log = logging.getLogger("xattrdiff")
    xattrdiff_log.setLevel(level)
    if xattrdiff_log.hasHandlers():
        xattrdiff_log.handlers.clear()

    # Subsystem log filtering
    _xattrdiff_subsystem_filter = SubsystemFilter("xattrdiff")

    # Main console handler
    _CONSOLE_HANDLER = logging.StreamHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(DiagnosticFormatter())
    _CONSOLE_HANDLER.addFilter(_xattrdiff_subsystem_filter)

    xattrdiff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down xattrdiff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "walk": XATTRDIFF_DEBUG_WALK,
        "merge": XATTRDIFF_DEBUG_MERGE,
        "command": XATTRDIFF_DEBUG_COMMAND,
        "all": XATTRDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    """
    Add tree comparison arguments to ``parser``.
    """
    parser.add_argument(
        "left",
        metavar="LEFT",
        nargs="?",
        help="The left hand (source) directory to compare",
    )
    parser.add_argument(
        "right",
        metavar="RIGHT",
        nargs="?",
        help="The right hand (destination) directory to compare",
    )
    parser.add_argument(
        "-q",
        "--queue-size",
        metavar="ENTRIES",
        type=int,
        help="Capacity of each directory walker's entry queue (default: 1000)",
    )
    parser.add_argument(
        "--status-interval",
        metavar="SECONDS",
        type=float,
        help="Minimum interval between verbose status updates (default: 5)",
    )


def main(args):
    """
    Main entry point for xattrdiff.
    """
    parser = ArgumentParser(
        description="Compare the extended attributes of two directory trees",
        prog=basename(args[0]),
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of xattrdiff",
        version=__version__,
    )

    _add_compare_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = EXIT_ERROR

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = _compare_cmd(cmd_args)
    else:
        try:
            status = _compare_cmd(cmd_args)
        except XattrDiffError as err:
            _log_error("%s", err)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


# vim: set et ts=4 sw=4 :
