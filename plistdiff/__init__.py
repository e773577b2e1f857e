# Copyright Red Hat
#
# plistdiff/__init__.py - Property list differ package initialisation
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Plistdiff top-level package.
"""
from ._plistdiff import *  # noqa: F401, F403
from ._plistdiff import __all__  # noqa: F401

__version__ = "0.1.0"
