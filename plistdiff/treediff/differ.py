# Copyright Red Hat
#
# plistdiff/treediff/differ.py - Property list differ tree differ
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level treediff interface.
"""
from typing import Any, Dict, Optional, Tuple
import logging

from plistdiff import (
    PlistDiffDecodeError,
    PlistDiffIOError,
    PlistDiffPermissionError,
    PLISTDIFF_SUBSYSTEM_TREEDIFF,
)

from .comparator import TreeComparator
from .options import DiffOptions
from .results import FileDiff, FileDiffSet
from .treewalk import PlistTree, Snapshot, open_tree
from .value import ABSENT, decode_plist

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_treediff(msg, *args, **kwargs):
    """A wrapper for treediff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_TREEDIFF}, **kwargs)


class PlistDiffer:
    """
    Top-level interface for comparing trees of property list files.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        """
        Initialise a new ``PlistDiffer``.

        :param options: Options to control this ``PlistDiffer`` instance.
        :type options: ``Optional[DiffOptions]``
        """
        options = options or DiffOptions()
        self.options: DiffOptions = options
        self.comparator: TreeComparator = TreeComparator(options.ignore_kinds)

    def read_file(self, tree: PlistTree, name: str) -> bytes:
        """
        Read one file from ``tree`` applying the error policy: a missing
        file reads as empty, as does an unreadable file when permission
        errors are ignored.

        :param tree: The tree to read from.
        :type tree: ``PlistTree``
        :param name: The relative path of the file.
        :type name: ``str``
        :returns: The file content, or ``b""``.
        :rtype: ``bytes``
        :raises: ``PlistDiffPermissionError`` or ``PlistDiffIOError``.
        """
        try:
            return tree.read_file(name)
        except FileNotFoundError:
            return b""
        except PermissionError as err:
            if self.options.ignore_permission_errors:
                _log_debug_treediff("Ignoring permission error reading %s", name)
                return b""
            raise PlistDiffPermissionError(
                f"Cannot read {name}: {err.strerror or err}"
            ) from err
        except OSError as err:
            raise PlistDiffIOError(
                f"Error reading {name}: {err.strerror or err}"
            ) from err

    def _decode(self, data: bytes, name: str) -> Any:
        try:
            return decode_plist(data)
        except PlistDiffDecodeError as err:
            if data:
                _log_debug_treediff("Treating %s as absent: %s", name, err)
            return ABSENT

    def diff_file(
        self, tree_a: PlistTree, tree_b: PlistTree, name: str
    ) -> Optional[FileDiff]:
        """
        Compare one file between two trees.

        :param tree_a: The old tree.
        :type tree_a: ``PlistTree``
        :param tree_b: The new tree.
        :type tree_b: ``PlistTree``
        :param name: The relative path of the file to compare.
        :type name: ``str``
        :returns: The differences for this file or ``None`` if the two
                  versions are equal.
        :rtype: ``Optional[FileDiff]``
        """
        data_b = self.read_file(tree_b, name)
        data_a = self.read_file(tree_a, name)

        differences = self.comparator.compare(
            self._decode(data_a, name), self._decode(data_b, name)
        )
        if not differences:
            return None
        return FileDiff(differences)

    def diff_trees(
        self, tree_a: PlistTree, tree_b: PlistTree
    ) -> Tuple[bool, FileDiffSet]:
        """
        Compare every property list file found in either tree.

        :param tree_a: The old tree.
        :type tree_a: ``PlistTree``
        :param tree_b: The new tree.
        :type tree_b: ``PlistTree``
        :returns: A tuple of ``(equal, diffs)`` where ``equal`` is ``True``
                  if no file differs.
        :rtype: ``Tuple[bool, FileDiffSet]``
        """
        delta: Dict[str, FileDiff] = {}

        files_a = tree_a.list_files()
        for name in sorted(files_a):
            file_diff = self.diff_file(tree_a, tree_b, name)
            if file_diff is not None:
                delta[name] = file_diff

        files_b = tree_b.list_files()
        for name in sorted(files_b - files_a):
            file_diff = self.diff_file(tree_a, tree_b, name)
            if file_diff is not None:
                delta[name] = file_diff

        _log_debug_treediff(
            "Compared %d files: %d differ", len(files_a | files_b), len(delta)
        )
        return not delta, FileDiffSet(delta)

    def compare_paths(self, path_a: str, path_b: str) -> Tuple[bool, FileDiffSet]:
        """
        Compare two directory trees (or files) on disk.

        :param path_a: The old tree.
        :type path_a: ``str``
        :param path_b: The new tree.
        :type path_b: ``str``
        :returns: A tuple of ``(equal, diffs)``.
        :rtype: ``Tuple[bool, FileDiffSet]``
        """
        _log_info("Comparing %s to %s", path_a, path_b)
        tree_a = open_tree(path_a, self.options)
        tree_b = open_tree(path_b, self.options)
        return self.diff_trees(tree_a, tree_b)

    def snapshot(self, tree: PlistTree) -> Snapshot:
        """
        Capture the property list files of ``tree`` in memory.

        :param tree: The tree to capture.
        :type tree: ``PlistTree``
        :returns: A new ``Snapshot``.
        :rtype: ``Snapshot``
        """
        return Snapshot.capture(tree, self.read_file)
