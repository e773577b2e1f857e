# Copyright Red Hat
#
# plistdiff/command.py - Property list differ command interface
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``plistdiff.command`` module provides the plist-diff command line
interface, and a simple procedural interface to the ``plistdiff.treediff``
modules.

The procedural interface is used by the ``plist-diff`` command line tool,
and may be used by application programs, or interactively in the Python
shell.
"""
from argparse import ArgumentParser, RawDescriptionHelpFormatter
from typing import Optional, TextIO
from os.path import basename
import logging
import sys

from plistdiff import (
    PLISTDIFF_DEBUG_TREEDIFF,
    PLISTDIFF_DEBUG_WATCH,
    PLISTDIFF_DEBUG_COMMAND,
    PLISTDIFF_DEBUG_ALL,
    PLISTDIFF_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    ProgressAwareHandler,
    PlistDiffError,
    __version__,
)
from plistdiff.progress import LiveWriter, TermControl
from plistdiff.treediff import DiffOptions, FileDiffSet, PlistDiffer, Watcher

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None

_DESCRIPTION = """\
plist-diff watches a directory tree and reports changes to stdout every 2 seconds.

It will also compare two directory trees with each other if you give it a
second directory tree.

On a mac, you can watch for changes to preferences with:

plist-diff ~/Library/Preferences
"""

COLOR_MODES = ["auto", "always", "never"]


def diff_trees(
    path_a: str, path_b: str, options: Optional[DiffOptions] = None
) -> FileDiffSet:
    """
    Compare two property list trees.

    :param path_a: The old directory tree or file.
    :type path_a: ``str``
    :param path_b: The new directory tree or file.
    :type path_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[DiffOptions]``
    :returns: The differences between the two trees.
    :rtype: ``FileDiffSet``
    """
    differ = PlistDiffer(options)
    _, diffs = differ.compare_paths(path_a, path_b)
    return diffs


def watch_tree(
    path: str,
    options: Optional[DiffOptions] = None,
    stream: Optional[TextIO] = None,
    color: str = "auto",
    json: bool = False,
    pretty: bool = False,
    count: Optional[int] = None,
):
    """
    Watch a property list tree, writing a report of all changes since the
    watch started to ``stream`` every 2 seconds.

    :param path: The directory tree or file to watch.
    :type path: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[DiffOptions]``
    :param stream: The stream to write reports to (default ``sys.stdout``).
    :type stream: ``Optional[TextIO]``
    :param color: A string to control color output: "auto", "always", or
                  "never".
    :type color: ``str``
    :param json: Write reports as JSON.
    :type json: ``bool``
    :param pretty: Indent JSON reports.
    :type pretty: ``bool``
    :param count: Stop after this many reports; watch until interrupted if
                  ``None``.
    :type count: ``Optional[int]``
    """
    stream = stream or sys.stdout
    term_control = TermControl(term_stream=stream, color=color)
    writer = LiveWriter(stream=stream, term_control=term_control)
    watcher = Watcher(
        PlistDiffer(options),
        path,
        writer,
        json=json,
        pretty=pretty,
        term_control=term_control,
    )
    watcher.run(count=count)


def _diff_cmd(cmd_args):
    """
    Compare two trees, or watch one tree, according to ``cmd_args``.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    options = DiffOptions.from_cmd_args(cmd_args)

    if cmd_args.pretty and not cmd_args.json:
        _log_error("Option --pretty only supported with --json")
        return 1

    if cmd_args.othertree is None:
        watch_tree(
            cmd_args.watchtree,
            options,
            color=cmd_args.color,
            json=cmd_args.json,
            pretty=cmd_args.pretty,
        )
        return 0

    diffs = diff_trees(cmd_args.watchtree, cmd_args.othertree, options)
    if diffs.equal:
        _log_debug_command("No differences found")
        return 0

    if cmd_args.json:
        print(diffs.json(pretty=cmd_args.pretty))
    else:
        print(diffs.render(TermControl(color=cmd_args.color)))
    return 0


def setup_logging(cmd_args):
    """
    Set up plistdiff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    plistdiff_log = logging.getLogger("plistdiff")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    plistdiff_log.setLevel(level)
    if plistdiff_log.hasHandlers():
        plistdiff_log.handlers.clear()

    _plistdiff_subsystem_filter = SubsystemFilter("plistdiff")

    _CONSOLE_HANDLER = ProgressAwareHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_plistdiff_subsystem_filter)

    plistdiff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down plistdiff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "treediff": PLISTDIFF_DEBUG_TREEDIFF,
        "watch": PLISTDIFF_DEBUG_WATCH,
        "command": PLISTDIFF_DEBUG_COMMAND,
        "all": PLISTDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_diff_args(parser):
    parser.add_argument(
        "watchtree",
        metavar="WATCHTREE",
        type=str,
        help="directory tree (or file) to watch for changes",
    )
    parser.add_argument(
        "othertree",
        metavar="OTHERTREE",
        type=str,
        nargs="?",
        default=None,
        help="directory tree (or file) to compare instead of watching the "
        "first tree for changes",
    )
    parser.add_argument(
        "--timestamps",
        dest="ignore_timestamps",
        action="store_false",
        help="include timestamp data in diffs. timestamps are ignored by default",
    )
    parser.add_argument(
        "--permissions-errors",
        dest="ignore_permission_errors",
        action="store_false",
        help="return an error when a file cannot be opened due to insufficient "
        "permissions. these errors are ignored by default",
    )
    parser.add_argument(
        "--color",
        metavar="WHEN",
        type=str,
        choices=COLOR_MODES,
        default="auto",
        help="Colorize diff output: auto, always, or never",
    )
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output differences in JSON notation",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output to be human readable",
    )


def main(args):
    """
    Main entry point for plist-diff.
    """
    parser = ArgumentParser(
        description=_DESCRIPTION,
        prog=basename(args[0]),
        formatter_class=RawDescriptionHelpFormatter,
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
        help="output the plist-diff version and exit",
        version=__version__,
    )
    _add_diff_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        try:
            status = _diff_cmd(cmd_args)
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
            status = 0
    else:
        try:
            status = _diff_cmd(cmd_args)
        except KeyboardInterrupt:
            _log_info("Exiting on user cancel")
            status = 0
        except PlistDiffError as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def console_main():
    """
    Console script entry point for plist-diff.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
