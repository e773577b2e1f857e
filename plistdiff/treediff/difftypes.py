# Copyright Red Hat
#
# plistdiff/treediff/difftypes.py - Property list differ diff types
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff types
"""
from enum import Enum


class DiffType(Enum):
    """
    Enum for different difference types.
    """

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    TYPE_CHANGED = "type_changed"
