# Copyright Red Hat
#
# tests/test_plistdiff.py - plistdiff package unit tests
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock
from io import StringIO
import logging

import plistdiff


log = logging.getLogger()


def _record(level, subsystem=None):
    record = logging.LogRecord("plistdiff.x", level, __file__, 1, "msg", (), None)
    if subsystem is not None:
        record.subsystem = subsystem
    return record


class PlistDiffTestsSimple(unittest.TestCase):
    """Test plistdiff module"""

    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.debug("Tearing down (%s)", self._testMethodName)
        plistdiff.set_debug_mask(0)

    def test_set_debug_mask(self):
        plistdiff.set_debug_mask(plistdiff.PLISTDIFF_DEBUG_ALL)
        self.assertEqual(plistdiff.get_debug_mask(), plistdiff.PLISTDIFF_DEBUG_ALL)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            plistdiff.set_debug_mask(plistdiff.PLISTDIFF_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            plistdiff.set_debug_mask(-1)

    def test_SubsystemFilter(self):
        # Start with no subsystems enabled
        plistdiff.set_debug_mask(0)
        sf = plistdiff.SubsystemFilter("plistdiff")
        self.assertEqual(sf.enabled_subsystems, set())
        # Enable a couple and ensure new filters initialise from cache
        plistdiff.set_debug_mask(
            plistdiff.PLISTDIFF_DEBUG_TREEDIFF | plistdiff.PLISTDIFF_DEBUG_WATCH
        )
        sf2 = plistdiff.SubsystemFilter("plistdiff")
        self.assertIn(plistdiff.PLISTDIFF_SUBSYSTEM_TREEDIFF, sf2.enabled_subsystems)
        self.assertIn(plistdiff.PLISTDIFF_SUBSYSTEM_WATCH, sf2.enabled_subsystems)
        self.assertNotIn(
            plistdiff.PLISTDIFF_SUBSYSTEM_COMMAND, sf2.enabled_subsystems
        )

    def test_SubsystemFilter_filter(self):
        sf = plistdiff.SubsystemFilter("plistdiff")
        sf.set_debug_subsystems([plistdiff.PLISTDIFF_SUBSYSTEM_WATCH])
        self.assertTrue(sf.filter(_record(logging.INFO, "plistdiff.treediff")))
        self.assertTrue(sf.filter(_record(logging.DEBUG)))
        self.assertTrue(sf.filter(_record(logging.DEBUG, "plistdiff.watch")))
        self.assertFalse(sf.filter(_record(logging.DEBUG, "plistdiff.treediff")))

    def test_ProgressAwareHandler_notifies_writers(self):
        stream = StringIO()
        handler = plistdiff.ProgressAwareHandler(stream=stream)
        writer = MagicMock()
        plistdiff.register_writer(writer)
        try:
            handler.emit(_record(logging.WARNING))
        finally:
            plistdiff.unregister_writer(writer)
        self.assertEqual(stream.getvalue(), "msg\n")
        # Not a standard stream: writers keep their position.
        writer.reset_position.assert_not_called()
        self.assertFalse(writer.registered)

    def test_errors_hierarchy(self):
        for err_class in (
            plistdiff.PlistDiffTreeAccessError,
            plistdiff.PlistDiffPermissionError,
            plistdiff.PlistDiffDecodeError,
            plistdiff.PlistDiffIOError,
            plistdiff.PlistDiffArgumentError,
        ):
            with self.subTest(err_class=err_class):
                self.assertTrue(issubclass(err_class, plistdiff.PlistDiffError))

    def test_version(self):
        self.assertEqual(plistdiff.__version__, "0.1.0")
