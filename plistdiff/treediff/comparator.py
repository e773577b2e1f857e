# Copyright Red Hat
#
# plistdiff/treediff/comparator.py - Property list differ tree comparator
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Structural comparison of decoded property list values.
"""
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Tuple,
    TYPE_CHECKING,
)
import logging
import math

from plistdiff import PlistDiffArgumentError, PLISTDIFF_SUBSYSTEM_TREEDIFF

from .difftypes import DiffType
from .path import MapKey, PathStep, SequenceIndex, TypeNarrowing, render_path
from .value import ABSENT, ValueKind, format_value, type_name, value_kind

if TYPE_CHECKING:
    from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_treediff(msg, *args, **kwargs):
    """A wrapper for treediff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_TREEDIFF}, **kwargs)


PathSteps = Tuple[PathStep, ...]


def _narrow(old: Any, new: Any) -> TypeNarrowing:
    """Return the narrowing step for the kind being inspected at a node."""
    return TypeNarrowing(value_kind(new if old is ABSENT else old))


class Difference:
    """
    One located difference between two decoded values.
    """

    def __init__(self, path: str, old: Any = ABSENT, new: Any = ABSENT):
        """
        Initialise a new ``Difference`` object.

        :param path: The rendered path of the differing node.
        :type path: ``str``
        :param old: The old value, or ``ABSENT`` if the node only exists in
                    the new value.
        :param new: The new value, or ``ABSENT`` if the node only exists in
                    the old value.
        """
        if old is ABSENT and new is ABSENT:
            raise PlistDiffArgumentError(
                f"Difference at '{path}' requires an old or new value"
            )
        self.path = path
        self.old = old
        self.new = new

    @property
    def diff_type(self) -> DiffType:
        """
        Classify this difference.

        :returns: The ``DiffType`` of this difference.
        :rtype: ``DiffType``
        """
        if self.old is ABSENT:
            return DiffType.ADDED
        if self.new is ABSENT:
            return DiffType.REMOVED
        if value_kind(self.old) != value_kind(self.new):
            return DiffType.TYPE_CHANGED
        return DiffType.MODIFIED

    def __eq__(self, other):
        if not isinstance(other, Difference):
            return NotImplemented
        return (self.path, self.old, self.new) == (other.path, other.old, other.new)

    def __repr__(self):
        return f"Difference({self.path!r}, old={self.old!r}, new={self.new!r})"

    def __str__(self):
        """
        Return the text form of this difference: one ``-`` line for the old
        value and one ``+`` line for the new value, each newline terminated.

        :returns: A human readable representation of this ``Difference``.
        :rtype: ``str``
        """
        diff_str = ""
        if self.old is not ABSENT:
            diff_str += (
                f"\t-{self.path}: {format_value(self.old)} ({type_name(self.old)})\n"
            )
        if self.new is not ABSENT:
            diff_str += (
                f"\t+{self.path}: {format_value(self.new)} ({type_name(self.new)})\n"
            )
        return diff_str

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Difference`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """

        def _side(value: Any) -> Optional[Dict[str, str]]:
            if value is ABSENT:
                return None
            return {"value": format_value(value), "type": type_name(value)}

        return {
            "path": self.path,
            "diff_type": self.diff_type.value,
            "old": _side(self.old),
            "new": _side(self.new),
        }


class TreeComparator:
    """
    Depth-first lock-step comparison of two decoded values.
    """

    def __init__(self, ignore_kinds: Iterable[ValueKind] = ()):
        """
        Initialise a new ``TreeComparator``.

        :param ignore_kinds: Kinds of value to treat as always equal. A node
                             is skipped when every side of it that exists
                             has one of these kinds.
        :type ignore_kinds: ``Iterable[ValueKind]``
        """
        self.ignore_kinds: FrozenSet[ValueKind] = frozenset(ignore_kinds)

    def compare(self, old: Any, new: Any) -> List[Difference]:
        """
        Compare two decoded values.

        If one root is ``ABSENT`` and the other is a map or sequence, every
        leaf of the existing side is reported at its own path rather than
        reporting the whole value once.

        :param old: The old value or ``ABSENT``.
        :param new: The new value or ``ABSENT``.
        :returns: The differences found, in depth-first traversal order.
        :rtype: ``List[Difference]``
        """
        diffs: List[Difference] = []
        old_kind = value_kind(old)
        new_kind = value_kind(new)
        if old_kind == ValueKind.ABSENT and new_kind.is_container:
            self._expand(new, diffs, new_side=True)
        elif new_kind == ValueKind.ABSENT and old_kind.is_container:
            self._expand(old, diffs, new_side=False)
        else:
            self._compare(old, new, diffs)
        _log_debug_treediff("Found %d differences", len(diffs))
        return diffs

    def _ignored(self, *kinds: ValueKind) -> bool:
        present = [kind for kind in kinds if kind != ValueKind.ABSENT]
        return bool(present) and all(kind in self.ignore_kinds for kind in present)

    def _compare(self, old: Any, new: Any, diffs: List[Difference]):
        # Iterative traversal: nesting depth is not limited by the stack.
        stack: List[Tuple[PathSteps, Any, Any]] = [((), old, new)]
        while stack:
            path, old, new = stack.pop()
            old_kind = value_kind(old)
            new_kind = value_kind(new)

            if old_kind == ValueKind.ABSENT and new_kind == ValueKind.ABSENT:
                continue

            if self._ignored(old_kind, new_kind):
                continue

            if old_kind != new_kind:
                diffs.append(Difference(render_path(path), old, new))
                continue

            children = []
            if old_kind == ValueKind.MAP:
                keys = list(old)
                keys.extend(key for key in new if key not in old)
                for key in keys:
                    old_item = old.get(key, ABSENT)
                    new_item = new.get(key, ABSENT)
                    step = (MapKey(key), _narrow(old_item, new_item))
                    children.append((path + step, old_item, new_item))
            elif old_kind == ValueKind.SEQUENCE:
                for index in range(max(len(old), len(new))):
                    old_item = old[index] if index < len(old) else ABSENT
                    new_item = new[index] if index < len(new) else ABSENT
                    step = (SequenceIndex(index), _narrow(old_item, new_item))
                    children.append((path + step, old_item, new_item))
            elif old_kind == ValueKind.FLOAT:
                if old != new and not (math.isnan(old) and math.isnan(new)):
                    diffs.append(Difference(render_path(path), old, new))
            elif old != new:
                diffs.append(Difference(render_path(path), old, new))
            stack.extend(reversed(children))

    def _expand(self, value: Any, diffs: List[Difference], new_side: bool):
        stack: List[Tuple[PathSteps, Any]] = [((), value)]
        while stack:
            path, value = stack.pop()
            kind = value_kind(value)
            if kind in self.ignore_kinds:
                continue
            if kind == ValueKind.MAP and value:
                children = [(MapKey(key), item) for key, item in value.items()]
            elif kind == ValueKind.SEQUENCE and value:
                children = [
                    (SequenceIndex(index), item) for index, item in enumerate(value)
                ]
            else:
                if new_side:
                    diffs.append(Difference(render_path(path), ABSENT, value))
                else:
                    diffs.append(Difference(render_path(path), value, ABSENT))
                continue
            stack.extend(
                (path + (step, TypeNarrowing(value_kind(item))), item)
                for step, item in reversed(children)
            )


def compare(
    old: Any, new: Any, options: Optional["DiffOptions"] = None
) -> List[Difference]:
    """
    Compare two decoded values using ``options``.

    :param old: The old value or ``ABSENT``.
    :param new: The new value or ``ABSENT``.
    :param options: Options controlling the comparison.
    :type options: ``Optional[DiffOptions]``
    :returns: The differences found, in depth-first traversal order.
    :rtype: ``List[Difference]``
    """
    ignore_kinds = options.ignore_kinds if options is not None else ()
    return TreeComparator(ignore_kinds).compare(old, new)
