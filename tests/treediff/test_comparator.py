# Copyright Red Hat
#
# tests/treediff/test_comparator.py - Tree comparator tests.
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import copy
import plistlib
from datetime import datetime

from plistdiff import PlistDiffArgumentError
from plistdiff.treediff.comparator import Difference, TreeComparator, compare
from plistdiff.treediff.difftypes import DiffType
from plistdiff.treediff.options import DiffOptions
from plistdiff.treediff.value import ABSENT, ValueKind, decode_plist

from ._util import plist_bytes

_NESTED = {
    "name": "example",
    "count": 3,
    "ratio": 0.5,
    "enabled": True,
    "created": datetime(2020, 5, 17, 9, 30),
    "blob": b"\x00\x01",
    "uid": plistlib.UID(7),
    "items": [1, "two", {"three": [3]}, []],
    "empty": {},
}


class TestDifference(unittest.TestCase):
    def test_difference_requires_a_side(self):
        with self.assertRaises(PlistDiffArgumentError):
            Difference(".x")

    def test_difference_types(self):
        self.assertEqual(Difference(".x", new=1).diff_type, DiffType.ADDED)
        self.assertEqual(Difference(".x", old=1).diff_type, DiffType.REMOVED)
        self.assertEqual(Difference(".x", 1, 2).diff_type, DiffType.MODIFIED)
        self.assertEqual(Difference(".x", 1, "1").diff_type, DiffType.TYPE_CHANGED)

    def test_difference_str(self):
        diff = Difference(".x", 1, 2)
        self.assertEqual(str(diff), "\t-.x: 1 (int)\n\t+.x: 2 (int)\n")

    def test_difference_str_one_side(self):
        self.assertEqual(str(Difference(".y", new=True)), "\t+.y: True (bool)\n")
        self.assertEqual(str(Difference(".y", old="a")), "\t-.y: 'a' (str)\n")

    def test_difference_to_dict(self):
        self.assertEqual(
            Difference(".x", new=2).to_dict(),
            {
                "path": ".x",
                "diff_type": "added",
                "old": None,
                "new": {"value": "2", "type": "int"},
            },
        )


class TestTreeComparator(unittest.TestCase):
    def setUp(self):
        self.comparator = TreeComparator()

    def test_compare_self_is_empty(self):
        values = [
            _NESTED,
            {},
            [],
            [[], {}],
            "s",
            0,
            float("nan"),
            {"nan": [float("nan")]},
            ABSENT,
        ]
        for value in values:
            with self.subTest(value=value):
                self.assertEqual(
                    self.comparator.compare(value, copy.deepcopy(value)), []
                )

    def test_compare_decoded_self_is_empty(self):
        value = {k: v for k, v in _NESTED.items() if k != "uid"}
        data = plist_bytes(value)
        self.assertEqual(
            self.comparator.compare(decode_plist(data), decode_plist(data)), []
        )

    def test_compare_root_scalar_kinds_differ(self):
        diffs = self.comparator.compare(1, "1")
        self.assertEqual(diffs, [Difference("", 1, "1")])

    def test_compare_bool_is_not_integer(self):
        diffs = self.comparator.compare({"a": 1}, {"a": True})
        self.assertEqual(diffs, [Difference(".a", 1, True)])
        self.assertEqual(diffs[0].diff_type, DiffType.TYPE_CHANGED)

    def test_compare_exact_numeric(self):
        self.assertEqual(len(self.comparator.compare(0.1 + 0.2, 0.3)), 1)
        self.assertEqual(len(self.comparator.compare(1, 2)), 1)

    def test_compare_map_key_added(self):
        diffs = self.comparator.compare({"a": 1}, {"a": 1, "b": [1, 2]})
        self.assertEqual(diffs, [Difference(".b", ABSENT, [1, 2])])

    def test_compare_map_key_removed(self):
        diffs = self.comparator.compare({"a": 1, "b": {"c": 2}}, {"a": 1})
        self.assertEqual(diffs, [Difference(".b", {"c": 2}, ABSENT)])

    def test_compare_kind_mismatch_no_recursion(self):
        diffs = self.comparator.compare({"a": {"b": 1}}, {"a": [1]})
        self.assertEqual(diffs, [Difference(".a", {"b": 1}, [1])])

    def test_compare_sequence_lengths(self):
        diffs = self.comparator.compare([1, 2], [1, 3, 4])
        self.assertEqual(
            diffs, [Difference("[1]", 2, 3), Difference("[2]", ABSENT, 4)]
        )

    def test_compare_nested_paths(self):
        old = {"Window": {"com.example.size": [1, 2, 3]}}
        new = {"Window": {"com.example.size": [1, 2, 4]}}
        diffs = self.comparator.compare(old, new)
        self.assertEqual(diffs, [Difference('.Window["com.example.size"][2]', 3, 4)])

    def test_compare_map_key_order(self):
        old = {"z": 1, "a": 1}
        new = {"n": 2, "a": 2, "z": 2}
        paths = [diff.path for diff in self.comparator.compare(old, new)]
        self.assertEqual(paths, [".z", ".a", ".n"])

    def test_compare_root_absent_vs_map_expands_leaves(self):
        diffs = self.comparator.compare(ABSENT, {"y": True})
        self.assertEqual(diffs, [Difference(".y", ABSENT, True)])

    def test_compare_root_map_vs_absent_expands_leaves(self):
        diffs = self.comparator.compare({"a": [1, {}], "b": "x"}, ABSENT)
        self.assertEqual(
            diffs,
            [
                Difference(".a[0]", 1, ABSENT),
                Difference(".a[1]", {}, ABSENT),
                Difference(".b", "x", ABSENT),
            ],
        )

    def test_compare_root_absent_vs_empty_map(self):
        self.assertEqual(
            self.comparator.compare(ABSENT, {}), [Difference("", ABSENT, {})]
        )

    def test_compare_root_absent_vs_scalar(self):
        self.assertEqual(
            self.comparator.compare("x", ABSENT), [Difference("", "x", ABSENT)]
        )

    def test_compare_deeply_nested(self):
        old, new = 1, 2
        for _ in range(5000):
            old, new = [old], [new]
        diffs = self.comparator.compare(old, new)
        self.assertEqual(len(diffs), 1)
        self.assertEqual(diffs[0].path, "[0]" * 5000)
        self.assertEqual((diffs[0].old, diffs[0].new), (1, 2))

    def test_compare_deeply_nested_kind_change(self):
        deep = "leaf"
        for _ in range(5000):
            deep = {"k": deep}
        diffs = self.comparator.compare({"a": deep}, {"a": "flat"})
        self.assertEqual(len(diffs), 1)
        self.assertEqual(diffs[0].path, ".a")
        self.assertEqual(diffs[0].diff_type, DiffType.TYPE_CHANGED)
        self.assertTrue(str(diffs[0]).startswith("\t-.a: {'k': {"))

    def test_compare_root_absent_expands_deeply_nested(self):
        deep = 1
        for _ in range(5000):
            deep = {"k": deep}
        diffs = self.comparator.compare(ABSENT, deep)
        self.assertEqual(len(diffs), 1)
        self.assertEqual(diffs[0].path, ".k" * 5000)
        self.assertEqual(diffs[0].new, 1)


class TestIgnoreKinds(unittest.TestCase):
    def setUp(self):
        self.comparator = TreeComparator([ValueKind.TIMESTAMP])

    def test_ignore_timestamps_at_any_depth(self):
        old = {"a": [{"t": datetime(2020, 1, 1)}], "t": datetime(2020, 1, 1)}
        new = {"a": [{"t": datetime(2021, 1, 1)}], "t": datetime(2022, 1, 1)}
        self.assertEqual(self.comparator.compare(old, new), [])

    def test_ignore_timestamp_added(self):
        old = {"a": 1}
        new = {"a": 1, "t": datetime(2020, 1, 1)}
        self.assertEqual(self.comparator.compare(old, new), [])

    def test_ignore_timestamp_kind_change_reported(self):
        old = {"t": datetime(2020, 1, 1)}
        new = {"t": "2020-01-01"}
        diffs = self.comparator.compare(old, new)
        self.assertEqual(len(diffs), 1)
        self.assertEqual(diffs[0].path, ".t")

    def test_ignore_timestamp_root_expansion(self):
        new = {"t": datetime(2020, 1, 1), "x": 1}
        self.assertEqual(
            self.comparator.compare(ABSENT, new), [Difference(".x", ABSENT, 1)]
        )

    def test_ignore_timestamps_other_changes_reported(self):
        old = {"t": datetime(2020, 1, 1), "x": 1}
        new = {"t": datetime(2021, 1, 1), "x": 2}
        self.assertEqual(
            self.comparator.compare(old, new), [Difference(".x", 1, 2)]
        )

    def test_compare_with_options(self):
        old = {"t": datetime(2020, 1, 1)}
        new = {"t": datetime(2021, 1, 1)}
        self.assertEqual(compare(old, new, DiffOptions(ignore_timestamps=True)), [])
        self.assertEqual(len(compare(old, new, DiffOptions())), 1)
        self.assertEqual(len(compare(old, new)), 1)
