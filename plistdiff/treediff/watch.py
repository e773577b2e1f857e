# Copyright Red Hat
#
# plistdiff/treediff/watch.py - Property list differ watch mode
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Watch a tree for changes against an initial snapshot.

A ``Watcher`` captures the property list files of a tree once and then, at
a fixed interval, compares the live tree against that snapshot and writes
the full report of differences to its writer. The snapshot is never
replaced, so each report shows every change since the watch started.
"""
from enum import Enum
from typing import Optional, TYPE_CHECKING
import logging
import time

from plistdiff import (
    PlistDiffArgumentError,
    PlistDiffError,
    PLISTDIFF_SUBSYSTEM_WATCH,
    WATCH_INTERVAL,
)

from .differ import PlistDiffer
from .results import FileDiffSet
from .treewalk import Snapshot, open_tree

if TYPE_CHECKING:
    from plistdiff.progress import LiveWriter, TermControl

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_watch(msg, *args, **kwargs):
    """A wrapper for watch subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_WATCH}, **kwargs)


class WatchState(Enum):
    """
    Enum for the states of a ``Watcher``.
    """

    IDLE = "idle"
    SNAPSHOTTED = "snapshotted"
    POLLING = "polling"
    TERMINATED = "terminated"


class Watcher:
    """
    Repeatedly compare a tree to its own initial snapshot.
    """

    def __init__(
        self,
        differ: PlistDiffer,
        path: str,
        writer: "LiveWriter",
        interval: float = WATCH_INTERVAL,
        json: bool = False,
        pretty: bool = False,
        term_control: Optional["TermControl"] = None,
    ):
        """
        Initialise a new ``Watcher``.

        :param differ: The ``PlistDiffer`` used for each comparison.
        :type differ: ``PlistDiffer``
        :param path: The directory tree or file to watch.
        :type path: ``str``
        :param writer: The output sink for reports.
        :type writer: ``LiveWriter``
        :param interval: Seconds between comparisons.
        :type interval: ``float``
        :param json: Write reports as JSON.
        :type json: ``bool``
        :param pretty: Indent JSON reports.
        :type pretty: ``bool``
        :param term_control: An optional ``TermControl`` used to color text
                             reports.
        :type term_control: ``Optional[TermControl]``
        """
        if interval <= 0:
            raise PlistDiffArgumentError(f"Invalid watch interval: {interval}")
        self.differ = differ
        self.path = path
        self.writer = writer
        self.interval = interval
        self.json = json
        self.pretty = pretty
        self.term_control = term_control
        self.state: WatchState = WatchState.IDLE
        self.snapshot: Optional[Snapshot] = None
        self.ticks: int = 0
        self._stop: bool = False

    def _terminate(self):
        self.state = WatchState.TERMINATED
        self.writer.stop()

    def _render(self, diffs: FileDiffSet) -> str:
        if self.json:
            return diffs.json(pretty=self.pretty)
        return diffs.render(self.term_control)

    def start(self) -> Snapshot:
        """
        Capture the baseline snapshot of the watched tree.

        :returns: The captured ``Snapshot``.
        :rtype: ``Snapshot``
        :raises: ``PlistDiffError`` if the tree cannot be read.
        """
        if self.state != WatchState.IDLE:
            raise PlistDiffArgumentError(
                f"Cannot start watcher in state {self.state.value}"
            )
        try:
            tree = open_tree(self.path, self.differ.options)
            self.snapshot = self.differ.snapshot(tree)
        except PlistDiffError:
            self.state = WatchState.TERMINATED
            raise
        self.state = WatchState.SNAPSHOTTED
        _log_info(
            "Watching %s for changes (%d files in %d directories)",
            self.path,
            len(self.snapshot.list_files()),
            len(self.snapshot.dirs),
        )
        return self.snapshot

    def tick(self) -> FileDiffSet:
        """
        Compare the live tree to the snapshot and write the report.

        The report is written even when no file differs.

        :returns: The differences found.
        :rtype: ``FileDiffSet``
        :raises: ``PlistDiffError`` on a fatal error, which also terminates
                 the watcher.
        """
        if self.state not in (WatchState.SNAPSHOTTED, WatchState.POLLING):
            raise PlistDiffArgumentError(
                f"Cannot poll watcher in state {self.state.value}"
            )
        try:
            tree = open_tree(self.path, self.differ.options)
            _, diffs = self.differ.diff_trees(self.snapshot, tree)
        except PlistDiffError:
            self._terminate()
            raise
        self.state = WatchState.POLLING
        self.ticks += 1
        _log_debug_watch("Tick %d: %d files differ", self.ticks, len(diffs))
        self.writer.update(self._render(diffs))
        return diffs

    def stop(self):
        """
        Request that ``run()`` returns before its next comparison.
        """
        self._stop = True

    def run(self, count: Optional[int] = None):
        """
        Snapshot the tree and compare against it every ``interval`` seconds.

        Comparisons never overlap: if one takes longer than the interval the
        missed intervals are skipped and the next comparison starts at the
        following interval boundary.

        :param count: Stop after this many comparisons. Runs until
                      ``stop()`` is called or an error occurs if ``None``.
        :type count: ``Optional[int]``
        :raises: ``PlistDiffError`` on a fatal error.
        """
        next_tick = time.monotonic() + self.interval
        self.start()
        self.writer.start()
        try:
            while not self._stop and (count is None or self.ticks < count):
                delay = next_tick - time.monotonic()
                if delay > 0:
                    time.sleep(delay)
                if self._stop:
                    break
                self.tick()
                now = time.monotonic()
                next_tick += self.interval
                while next_tick <= now:
                    _log_debug_watch("Skipping missed tick")
                    next_tick += self.interval
        finally:
            if self.state != WatchState.TERMINATED:
                self._terminate()
