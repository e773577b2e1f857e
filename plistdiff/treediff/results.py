# Copyright Red Hat
#
# plistdiff/treediff/results.py - Property list differ results
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Per-file and whole-tree diff results.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Sequence
import json

from plistdiff.progress import TermControl

from .comparator import Difference


def _escape(text: str) -> str:
    """Escape ``$`` in ``text`` for use in a ``TermControl`` template."""
    return text.replace("$", "$$")


class FileDiff:
    """
    The differences found between the two versions of one file.
    """

    def __init__(self, differences: Sequence[Difference]):
        """
        Initialise a new ``FileDiff`` object.

        :param differences: The differences for this file in traversal order.
        :type differences: ``Sequence[Difference]``
        """
        self.differences: List[Difference] = list(differences)

    def __len__(self) -> int:
        return len(self.differences)

    def __iter__(self) -> Iterator[Difference]:
        return iter(self.differences)

    def __str__(self) -> str:
        """
        Render the differences for this file, separated by blank lines.

        :returns: The multi-line diff text for this file.
        :rtype: ``str``
        """
        return "".join(f"{diff}\n" for diff in self.differences).rstrip("\n")

    def to_dict(self) -> List[Dict[str, Any]]:
        """
        Convert this ``FileDiff`` into a list of dictionaries suitable for
        encoding as JSON.

        :returns: One dictionary per difference.
        :rtype: ``List[Dict[str, Any]]``
        """
        return [diff.to_dict() for diff in self.differences]


class FileDiffSet(Mapping):
    """
    Mapping from relative file path to the ``FileDiff`` for that file.

    Only files with at least one difference are present. Instances are not
    modified after construction.
    """

    def __init__(self, file_diffs: Optional[Mapping[str, FileDiff]] = None):
        """
        Initialise a new ``FileDiffSet``.

        :param file_diffs: A mapping of relative file paths to diffs.
        :type file_diffs: ``Optional[Mapping[str, FileDiff]]``
        """
        self._file_diffs: Dict[str, FileDiff] = dict(file_diffs or {})

    def __getitem__(self, filename: str) -> FileDiff:
        return self._file_diffs[filename]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._file_diffs))

    def __len__(self) -> int:
        return len(self._file_diffs)

    @property
    def equal(self) -> bool:
        """
        True if no file differs.
        """
        return not self._file_diffs

    def __str__(self) -> str:
        """
        Render this diff set as text: each file name followed by its diff,
        in file name order.

        :returns: The rendered report, or the empty string if no file differs.
        :rtype: ``str``
        """
        return "".join(f"{filename}:\n{self[filename]}\n\n" for filename in self)

    def render(self, term_control: Optional[TermControl] = None) -> str:
        """
        Render this diff set as text with optional color.

        File names are shown in bold, removed values in red and added values
        in green when ``term_control`` provides those capabilities.

        :param term_control: An optional ``TermControl`` instance to use for
                             rendering color output.
        :type term_control: ``Optional[TermControl]``
        :returns: The rendered report.
        :rtype: ``str``
        """
        if term_control is None:
            return str(self)

        def _color_line(line: str) -> str:
            if line.startswith("\t-"):
                return "${RED}" + _escape(line) + "${NORMAL}"
            if line.startswith("\t+"):
                return "${GREEN}" + _escape(line) + "${NORMAL}"
            return _escape(line)

        blocks = []
        for filename in self:
            lines = str(self[filename]).split("\n")
            body = "\n".join(_color_line(line) for line in lines)
            blocks.append(f"${{BOLD}}{_escape(filename)}:${{NORMAL}}\n{body}\n\n")
        return term_control.render("".join(blocks))

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Convert this ``FileDiffSet`` into a dictionary suitable for encoding
        as JSON.

        :returns: A dictionary mapping file names to lists of differences.
        :rtype: ``Dict[str, List[Dict[str, Any]]]``
        """
        return {filename: self[filename].to_dict() for filename in self}

    def json(self, pretty=False) -> str:
        """
        Return a string representation of this ``FileDiffSet`` in JSON
        notation.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: A JSON representation of this instance.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)
