# Copyright Red Hat
#
# plistdiff/treediff/options.py - Property list differ options
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff options.
"""
from dataclasses import dataclass, fields
from typing import FrozenSet
from argparse import Namespace
import logging

from .value import ValueKind

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


@dataclass(frozen=True)
class DiffOptions:
    """
    Property list tree comparison options.
    """

    #: Ignore timestamp values anywhere in the compared trees
    ignore_timestamps: bool = False
    #: Treat files that cannot be read due to permissions as empty
    ignore_permission_errors: bool = False

    def __str__(self):
        """
        Return a human readable string representation of this
        ``DiffOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @property
    def ignore_kinds(self) -> FrozenSet[ValueKind]:
        """
        The value kinds excluded from comparison by these options.

        :returns: A set of ``ValueKind`` values to skip.
        :rtype: ``FrozenSet[ValueKind]``
        """
        kinds = set()
        if self.ignore_timestamps:
            kinds.add(ValueKind.TIMESTAMP)
        return frozenset(kinds)

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "DiffOptions":
        """
        Initialise DiffOptions from command line arguments.

        Construct a new ``DiffOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that do not correspond to an
        option are ignored and missing options take their default value.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``DiffOptions`` instance
        :rtype: ``DiffOptions``
        """
        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: bool(getattr(cmd_args, name))
            for name in field_names
            if hasattr(cmd_args, name)
        }
        options = cls(**kwargs)
        _log_debug("Initialised DiffOptions from arguments: %s", repr(options))
        return options
