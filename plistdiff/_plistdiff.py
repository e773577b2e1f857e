# Copyright Red Hat
#
# plistdiff/_plistdiff.py - Property list differ global definitions
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level plistdiff package.
"""
from typing import Optional, TextIO, TYPE_CHECKING
import logging
import weakref
import sys

if TYPE_CHECKING:
    from .progress import LiveWriter

_log = logging.getLogger("plistdiff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Plistdiff debugging subsystem mask
PLISTDIFF_DEBUG_TREEDIFF = 1
PLISTDIFF_DEBUG_WATCH = 2
PLISTDIFF_DEBUG_COMMAND = 4
PLISTDIFF_DEBUG_ALL = (
    PLISTDIFF_DEBUG_TREEDIFF | PLISTDIFF_DEBUG_WATCH | PLISTDIFF_DEBUG_COMMAND
)

# Plistdiff debugging subsystem names
PLISTDIFF_SUBSYSTEM_TREEDIFF = "plistdiff.treediff"
PLISTDIFF_SUBSYSTEM_WATCH = "plistdiff.watch"
PLISTDIFF_SUBSYSTEM_COMMAND = "plistdiff.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    PLISTDIFF_DEBUG_TREEDIFF: PLISTDIFF_SUBSYSTEM_TREEDIFF,
    PLISTDIFF_DEBUG_WATCH: PLISTDIFF_SUBSYSTEM_WATCH,
    PLISTDIFF_DEBUG_COMMAND: PLISTDIFF_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

# Registry of active live writers: uses a WeakSet so we don't prevent
# garbage collection.
_active_writers: weakref.WeakSet = weakref.WeakSet()

#: File name suffix selecting the files that take part in a comparison
PLIST_SUFFIX = ".plist"

#: Synthetic name given to a single file compared as a one-entry tree
SINGLE_FILE_NAME = "single-file.plist"

#: Interval between watch mode comparisons in seconds
WATCH_INTERVAL = 2.0


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


def get_debug_mask():
    """
    Return the current debug mask for the ``plistdiff`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    plistdiff_log = logging.getLogger("plistdiff")

    for handler in plistdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``plistdiff`` package.

    :param mask: the logical OR of the ``PLISTDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > PLISTDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid plistdiff debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    plistdiff_log = logging.getLogger("plistdiff")
    for handler in plistdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def register_writer(writer: "LiveWriter"):
    """Register a live writer for log coordination."""
    _active_writers.add(writer)
    writer.registered = True


def unregister_writer(writer: "LiveWriter"):
    """Unregister a live writer."""
    _active_writers.discard(writer)
    writer.registered = False


def notify_log_output(stream: TextIO):
    """
    Notify live writers that log output occurred on stream.

    Called by ProgressAwareHandler after emitting a record.

    :param stream: The stream that received output.
    :type stream: ``TextIO``
    """
    if stream not in (sys.stdout, sys.stderr):
        return
    for writer in list(_active_writers):
        writer.reset_position()


class ProgressAwareHandler(logging.StreamHandler):
    """
    A logging handler that coordinates with active ``LiveWriter`` instances.

    After emitting a log record, notifies any writers repainting a terminal
    so that the next repaint does not erase the log message.
    """

    def __init__(self, stream: Optional[TextIO] = None, **kwargs):
        super().__init__(stream=stream or sys.stderr, **kwargs)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.stream.write(msg + "\n")
            self.stream.flush()
            notify_log_output(self.stream)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


#
# Plistdiff exception types
#


class PlistDiffError(Exception):
    """
    Base class for property list differ errors.
    """


class PlistDiffTreeAccessError(PlistDiffError):
    """
    The root of a tree to compare cannot be accessed: it does not exist,
    cannot be read, or is neither a directory nor a regular file.
    """


class PlistDiffPermissionError(PlistDiffError):
    """
    A file or directory in a tree cannot be read due to insufficient
    permissions and permission errors are not being ignored.
    """


class PlistDiffDecodeError(PlistDiffError):
    """
    Data could not be decoded as a property list.
    """


class PlistDiffIOError(PlistDiffError):
    """
    Any other error reading a file from a tree.
    """


class PlistDiffArgumentError(PlistDiffError):
    """
    An invalid argument was passed to a plistdiff API call.
    """


__all__ = [
    "PLISTDIFF_DEBUG_TREEDIFF",
    "PLISTDIFF_DEBUG_WATCH",
    "PLISTDIFF_DEBUG_COMMAND",
    "PLISTDIFF_DEBUG_ALL",
    "PLISTDIFF_SUBSYSTEM_TREEDIFF",
    "PLISTDIFF_SUBSYSTEM_WATCH",
    "PLISTDIFF_SUBSYSTEM_COMMAND",
    "PLIST_SUFFIX",
    "SINGLE_FILE_NAME",
    "WATCH_INTERVAL",
    # Debug logging
    "SubsystemFilter",
    "set_debug_mask",
    "get_debug_mask",
    # Live output log callbacks
    "register_writer",
    "unregister_writer",
    "notify_log_output",
    "ProgressAwareHandler",
    "PlistDiffError",
    "PlistDiffTreeAccessError",
    "PlistDiffPermissionError",
    "PlistDiffDecodeError",
    "PlistDiffIOError",
    "PlistDiffArgumentError",
]
