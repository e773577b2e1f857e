# Copyright Red Hat
#
# tests/treediff/test_options.py - DiffOptions tests.
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from argparse import Namespace
from dataclasses import FrozenInstanceError

from plistdiff.treediff.options import DiffOptions
from plistdiff.treediff.value import ValueKind


class TestDiffOptions(unittest.TestCase):
    def test_DiffOptions_defaults(self):
        opts = DiffOptions()
        self.assertFalse(opts.ignore_timestamps)
        self.assertFalse(opts.ignore_permission_errors)
        self.assertEqual(opts.ignore_kinds, frozenset())

    def test_DiffOptions__str__(self):
        opts = DiffOptions(ignore_timestamps=True)
        s = str(opts)
        self.assertIn("ignore_timestamps=True", s)
        self.assertIn("ignore_permission_errors=False", s)

    def test_DiffOptions_frozen(self):
        opts = DiffOptions()
        with self.assertRaises(FrozenInstanceError):
            opts.ignore_timestamps = True

    def test_ignore_kinds(self):
        opts = DiffOptions(ignore_timestamps=True)
        self.assertEqual(opts.ignore_kinds, frozenset({ValueKind.TIMESTAMP}))

    def test_from_cmd_args(self):
        """Test initialization from argparse Namespace."""
        args = Namespace(
            ignore_timestamps=True,
            color="never",
            unknown_arg="ignored",
        )
        opts = DiffOptions.from_cmd_args(args)

        self.assertTrue(opts.ignore_timestamps)
        # Should use defaults for missing args
        self.assertFalse(opts.ignore_permission_errors)
