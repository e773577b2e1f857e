# Copyright Red Hat
#
# tests/treediff/_util.py - Tree diff test utilities.
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import plistlib
import os


def plist_bytes(value, binary=False):
    """
    Encode ``value`` as XML (or binary) property list data.
    """
    fmt = plistlib.FMT_BINARY if binary else plistlib.FMT_XML
    return plistlib.dumps(value, fmt=fmt)


def make_tree(root, files):
    """
    Populate the directory ``root`` from a mapping of relative paths to
    content. Values that are not ``bytes`` are encoded as XML plists.
    """
    for name, content in files.items():
        path = os.path.join(root, *name.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if not isinstance(content, bytes):
            content = plist_bytes(content)
        with open(path, "wb") as fp:
            fp.write(content)
