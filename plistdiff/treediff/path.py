# Copyright Red Hat
#
# plistdiff/treediff/path.py - Property list differ value paths
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Traversal paths into decoded values and their canonical string form.

A path is a sequence of ``PathStep`` objects leading from the root of a
decoded value to the node where a difference was found. ``render_path()``
converts a path into a string such as ``.Window["com.example.size"][2]``.
"""
from typing import Optional, Sequence
import json
import re

from .value import ValueKind

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class PathStep:
    """
    Base class for a single step in a traversal path.
    """

    def render(self) -> str:
        """
        Return the text this step contributes to a rendered path.

        :returns: The rendered step.
        :rtype: ``str``
        """
        return ""

    def __eq__(self, other):
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self):
        return hash((type(self), tuple(self.__dict__.items())))


class MapKey(PathStep):
    """
    Descent into a map value by key.
    """

    def __init__(self, key: str):
        self.key = key

    def render(self) -> str:
        if _IDENTIFIER_RE.match(self.key):
            return f".{self.key}"
        return f"[{json.dumps(self.key)}]"

    def __repr__(self):
        return f"MapKey({self.key!r})"


class SequenceIndex(PathStep):
    """
    Descent into a sequence value by index.
    """

    def __init__(self, index: int):
        self.index = index

    def render(self) -> str:
        return f"[{self.index}]"

    def __repr__(self):
        return f"SequenceIndex({self.index})"


class Indirection(PathStep):
    """
    Traversal through an optional or reference-like layer of a value.
    """

    def __repr__(self):
        return "Indirection()"


class TypeNarrowing(PathStep):
    """
    Inspection of a value as its concrete kind. Never rendered.
    """

    def __init__(self, kind: ValueKind):
        self.kind = kind

    def __repr__(self):
        return f"TypeNarrowing({self.kind})"


def render_path(path: Sequence[PathStep]) -> str:
    """
    Render a traversal path as a string.

    Key and index steps render left to right. Runs of consecutive
    ``Indirection`` steps collapse into a single ``(***`` prefix that is
    closed at the position of the run. One level of a run is dropped when
    it is followed by a ``MapKey`` (map access dereferences implicitly). A
    run ending the path is rendered without parentheses, and a single
    trailing ``Indirection`` renders nothing. ``TypeNarrowing`` steps
    contribute nothing.

    :param path: The steps to render.
    :type path: ``Sequence[PathStep]``
    :returns: The canonical string form of ``path``. An empty path renders
              as the empty string.
    :rtype: ``str``
    """
    prefix = []
    suffix = []
    num_indirect = 0
    for i, step in enumerate(path):
        next_step: Optional[PathStep] = path[i + 1] if i + 1 < len(path) else None
        if isinstance(step, Indirection):
            num_indirect += 1
            pre, post = "(", ")"
            if isinstance(next_step, Indirection):
                continue
            if isinstance(next_step, MapKey):
                num_indirect -= 1
            elif next_step is None:
                if num_indirect == 1:
                    num_indirect = 0
                pre, post = "", ""
            if num_indirect > 0:
                prefix.append(pre + "*" * num_indirect)
                suffix.append(post)
            num_indirect = 0
            continue
        if isinstance(step, TypeNarrowing):
            continue
        suffix.append(step.render())
    return "".join(reversed(prefix)) + "".join(suffix)
