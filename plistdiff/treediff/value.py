# Copyright Red Hat
#
# plistdiff/treediff/value.py - Property list differ value model
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Decoded property list values.

Property lists decode to native Python values: ``dict`` (maps with string
keys), ``list`` (sequences) and the scalar types ``str``, ``int``,
``float``, ``bool``, ``datetime``, ``bytes`` and ``plistlib.UID``. The
``ABSENT`` sentinel stands in for a value that does not exist on one side
of a comparison, or that could not be decoded.
"""
from datetime import datetime
from enum import Enum
from typing import Any
import plistlib
import logging
import reprlib
import codecs
import sys

import openstep_plist

from plistdiff import PlistDiffDecodeError, PLISTDIFF_SUBSYSTEM_TREEDIFF

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_treediff(msg, *args, **kwargs):
    """A wrapper for treediff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_TREEDIFF}, **kwargs)


class _Absent:
    """
    Sentinel type for a value that does not exist.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Absent, ())


#: The value of a node missing from one side of a comparison
ABSENT = _Absent()


class ValueKind(Enum):
    """
    Enum for the kinds of decoded property list value.
    """

    MAP = "map"
    SEQUENCE = "sequence"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    DATA = "data"
    UID = "uid"
    ABSENT = "absent"

    @property
    def is_container(self) -> bool:
        """
        True if values of this kind contain other values.
        """
        return self in (ValueKind.MAP, ValueKind.SEQUENCE)


# Order matters: bool is a subclass of int.
_KIND_TYPES = (
    (dict, ValueKind.MAP),
    (list, ValueKind.SEQUENCE),
    (tuple, ValueKind.SEQUENCE),
    (str, ValueKind.STRING),
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INTEGER),
    (float, ValueKind.FLOAT),
    (datetime, ValueKind.TIMESTAMP),
    (bytes, ValueKind.DATA),
    (bytearray, ValueKind.DATA),
    (plistlib.UID, ValueKind.UID),
)

#: Byte order marks selecting the text encoding of a text format plist
_TEXT_BOMS = (
    (codecs.BOM_UTF16_BE, "utf-16"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF8, "utf-8-sig"),
)

#: Nesting depth beyond which values are displayed abbreviated
_MAX_DISPLAY_DEPTH = 64

_deep_repr = reprlib.Repr()
_deep_repr.maxlevel = _MAX_DISPLAY_DEPTH
_deep_repr.maxdict = _deep_repr.maxlist = _deep_repr.maxtuple = sys.maxsize
_deep_repr.maxstring = _deep_repr.maxlong = _deep_repr.maxother = sys.maxsize


def value_kind(value: Any) -> ValueKind:
    """
    Return the ``ValueKind`` of a decoded value.

    :param value: A decoded property list value or ``ABSENT``.
    :returns: The kind of ``value``.
    :rtype: ``ValueKind``
    """
    if value is ABSENT:
        return ValueKind.ABSENT
    for value_type, kind in _KIND_TYPES:
        if isinstance(value, value_type):
            return kind
    raise TypeError(f"Not a property list value: {value!r} ({type(value).__name__})")


def _decode_text_plist(data: bytes) -> Any:
    """
    Decode an OpenStep or GNUstep text format property list whose root is a
    dictionary or an array.
    """
    encoding = "utf-8"
    for bom, bom_encoding in _TEXT_BOMS:
        if data.startswith(bom):
            encoding = bom_encoding
            break
    value = openstep_plist.loads(data.decode(encoding))
    if not isinstance(value, (dict, list)):
        raise ValueError(f"Text property list root is a {type(value).__name__}")
    return value


def decode_plist(data: bytes) -> Any:
    """
    Decode property list data in XML, binary or text (OpenStep) format.

    XML and binary data are decoded by ``plistlib``. Data that ``plistlib``
    rejects is then parsed as a text property list, which is accepted only
    if its root is a dictionary or an array.

    :param data: The raw file content.
    :type data: ``bytes``
    :returns: The decoded root value.
    :raises: ``PlistDiffDecodeError`` if ``data`` is not a valid property
             list.
    """
    if not data:
        raise PlistDiffDecodeError("Empty property list data")
    try:
        return plistlib.loads(data)
    except Exception as err:  # pylint: disable=broad-exception-caught
        plist_err = err

    try:
        return _decode_text_plist(data)
    except Exception as err:  # pylint: disable=broad-exception-caught
        _log_debug_treediff(
            "Failed to decode %d bytes of plist data: %s (text format: %s)",
            len(data),
            plist_err,
            err,
        )
        raise PlistDiffDecodeError(
            f"Invalid property list data: {plist_err}"
        ) from plist_err


def format_value(value: Any) -> str:
    """
    Return the display form of a value.

    Timestamps are shown in ISO 8601 notation; all other values use their
    ``repr()``. Containers nested too deeply for ``repr()`` are shown with
    their innermost levels abbreviated to ``...``.

    :param value: The value to format.
    :returns: A human readable string.
    :rtype: ``str``
    """
    if isinstance(value, datetime):
        return value.isoformat()
    try:
        return repr(value)
    except RecursionError:
        return _deep_repr.repr(value)


def type_name(value: Any) -> str:
    """
    Return the type name shown alongside a displayed value.

    :param value: The value to name.
    :returns: The Python type name of ``value``.
    :rtype: ``str``
    """
    return type(value).__name__
