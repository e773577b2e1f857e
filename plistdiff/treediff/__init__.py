# Copyright Red Hat
#
# plistdiff/treediff/__init__.py - Property list differ tree diff package
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Property list tree diff package.

Provides structural comparison of decoded property lists, rendering of the
location of each difference, whole-tree comparison and watch mode. The main
entry points are ``PlistDiffer``, ``Watcher`` and ``DiffOptions``.
"""
from .comparator import Difference, TreeComparator, compare
from .differ import PlistDiffer
from .options import DiffOptions
from .results import FileDiff, FileDiffSet
from .treewalk import Snapshot, open_tree
from .value import ABSENT, ValueKind, decode_plist
from .watch import Watcher, WatchState

__all__ = [
    "ABSENT",
    "DiffOptions",
    "Difference",
    "FileDiff",
    "FileDiffSet",
    "PlistDiffer",
    "Snapshot",
    "TreeComparator",
    "ValueKind",
    "WatchState",
    "Watcher",
    "compare",
    "decode_plist",
    "open_tree",
]
