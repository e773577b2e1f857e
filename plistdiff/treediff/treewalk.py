# Copyright Red Hat
#
# plistdiff/treediff/treewalk.py - Property list differ tree walk
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree walking support for treediff.

A ``PlistTree`` is a logical view of a directory tree (or of a single file)
that lists the property list files it contains and reads their raw content
by relative path.
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, Optional, Set
import logging
import stat
import os

from plistdiff import (
    PlistDiffPermissionError,
    PlistDiffTreeAccessError,
    PLIST_SUFFIX,
    PLISTDIFF_SUBSYSTEM_TREEDIFF,
    SINGLE_FILE_NAME,
)

from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_treediff(msg, *args, **kwargs):
    """A wrapper for treediff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PLISTDIFF_SUBSYSTEM_TREEDIFF}, **kwargs)


def is_plist_name(path: str) -> bool:
    """
    True if ``path`` names a file taking part in comparisons.

    :param path: A relative or absolute file path.
    :type path: ``str``
    :returns: ``True`` if the name ends in ``.plist``.
    :rtype: ``bool``
    """
    return path.endswith(PLIST_SUFFIX)


class PlistTree(ABC):
    """
    Base class for a collection of property list files.
    """

    @abstractmethod
    def list_files(self) -> Set[str]:
        """
        Return the relative paths of the property list files in this tree.

        :returns: A set of ``/`` separated relative paths.
        :rtype: ``Set[str]``
        """

    @abstractmethod
    def read_file(self, name: str) -> bytes:
        """
        Read the raw content of a file in this tree.

        :param name: The relative path of the file to read.
        :type name: ``str``
        :returns: The file content.
        :rtype: ``bytes``
        :raises: ``FileNotFoundError`` if the file does not exist,
                 ``PermissionError`` if the file cannot be read due to
                 permissions, or ``OSError`` for any other read failure.
        """


class DirectoryTree(PlistTree):
    """
    A directory tree on disk.
    """

    def __init__(self, root: str, ignore_permission_errors: bool = False):
        """
        Initialise a new ``DirectoryTree``.

        :param root: The path to the root directory of the tree.
        :type root: ``str``
        :param ignore_permission_errors: Skip sub-directories that cannot be
                                         listed due to permissions instead
                                         of raising an error.
        :type ignore_permission_errors: ``bool``
        """
        self.root = root
        self.ignore_permission_errors = ignore_permission_errors

    def __repr__(self):
        return f"DirectoryTree({self.root!r})"

    def _on_walk_error(self, err: OSError):
        """
        Handle an error listing a directory during ``os.walk()``.

        :param err: The error raised by ``os.scandir()``.
        :type err: ``OSError``
        """
        if os.path.normpath(str(err.filename)) == os.path.normpath(self.root):
            raise PlistDiffTreeAccessError(
                f"Cannot read tree root {self.root}: {err.strerror}"
            ) from err
        if isinstance(err, PermissionError):
            if self.ignore_permission_errors:
                _log_warn("Skipping unreadable directory %s", err.filename)
                return
            raise PlistDiffPermissionError(
                f"Cannot read directory {err.filename}: {err.strerror}"
            ) from err
        if isinstance(err, FileNotFoundError):
            _log_debug_treediff("Directory vanished during walk: %s", err.filename)
            return
        raise PlistDiffTreeAccessError(
            f"Error reading directory {err.filename}: {err.strerror}"
        ) from err

    def _relpath(self, path: str) -> str:
        return os.path.relpath(path, self.root).replace(os.sep, "/")

    def walk(self, on_dir: Optional[Callable[[str], None]] = None) -> Set[str]:
        """
        Walk this tree and return the relative paths of its property list
        files. Symbolic links are not followed and only regular files are
        returned.

        :param on_dir: An optional callback invoked with the relative path of
                       each sub-directory found.
        :type on_dir: ``Optional[Callable[[str], None]]``
        :returns: A set of relative file paths.
        :rtype: ``Set[str]``
        """
        files = set()
        for dirpath, dirnames, filenames in os.walk(
            self.root, onerror=self._on_walk_error
        ):
            if on_dir is not None:
                for dirname in dirnames:
                    full_path = os.path.join(dirpath, dirname)
                    if not os.path.islink(full_path):
                        on_dir(self._relpath(full_path))
            for filename in filenames:
                if not is_plist_name(filename):
                    continue
                full_path = os.path.join(dirpath, filename)
                try:
                    file_stat = os.lstat(full_path)
                except FileNotFoundError:
                    # Path vanished between discovery and stat; skip it.
                    continue
                if not stat.S_ISREG(file_stat.st_mode):
                    continue
                files.add(self._relpath(full_path))
        _log_debug_treediff("Found %d plist files in %s", len(files), self.root)
        return files

    def list_files(self) -> Set[str]:
        return self.walk()

    def read_file(self, name: str) -> bytes:
        with open(os.path.join(self.root, name), "rb") as fp:
            return fp.read()


class _MemoryTree(PlistTree):
    """
    A tree held entirely in memory.
    """

    def __init__(self, files: Dict[str, bytes]):
        self._files: Dict[str, bytes] = dict(files)

    def list_files(self) -> Set[str]:
        return set(self._files)

    def read_file(self, name: str) -> bytes:
        try:
            return self._files[name]
        except KeyError as err:
            raise FileNotFoundError(f"No such file in tree: {name}") from err


class SingleFileTree(_MemoryTree):
    """
    A single regular file presented as a one-entry tree named
    ``single-file.plist``.
    """

    def __init__(self, path: str, data: bytes):
        """
        Initialise a new ``SingleFileTree``.

        :param path: The path the file was read from.
        :type path: ``str``
        :param data: The file content.
        :type data: ``bytes``
        """
        super().__init__({SINGLE_FILE_NAME: data})
        self.path = path

    def __repr__(self):
        return f"SingleFileTree({self.path!r})"


class Snapshot(_MemoryTree):
    """
    An immutable point-in-time copy of the property list files in a tree.

    ``dirs`` records the directory structure of the captured tree. It is
    reported when a watch starts and is not used when comparing trees.
    """

    def __init__(self, files: Dict[str, bytes], dirs: Optional[Set[str]] = None):
        """
        Initialise a new ``Snapshot``.

        :param files: A mapping of relative file paths to content.
        :type files: ``Dict[str, bytes]``
        :param dirs: The relative paths of the directories in the tree.
        :type dirs: ``Optional[Set[str]]``
        """
        super().__init__(files)
        self.dirs: FrozenSet[str] = frozenset(dirs or ())

    def __repr__(self):
        return f"Snapshot(files={len(self._files)}, dirs={len(self.dirs)})"

    @classmethod
    def capture(
        cls, tree: PlistTree, read_file: Callable[[PlistTree, str], bytes]
    ) -> "Snapshot":
        """
        Capture the current content of ``tree``.

        :param tree: The tree to copy.
        :type tree: ``PlistTree``
        :param read_file: A function reading one file from ``tree``, applying
                          the caller's error policy.
        :type read_file: ``Callable[[PlistTree, str], bytes]``
        :returns: A new ``Snapshot`` of ``tree``.
        :rtype: ``Snapshot``
        """
        dirs = set()
        if isinstance(tree, DirectoryTree):
            names = tree.walk(on_dir=dirs.add)
        else:
            names = tree.list_files()
        files = {name: read_file(tree, name) for name in sorted(names)}
        snapshot = cls(files, dirs)
        _log_debug_treediff("Captured %s", repr(snapshot))
        return snapshot


def open_tree(path: str, options: Optional[DiffOptions] = None) -> PlistTree:
    """
    Return a ``PlistTree`` for ``path``.

    :param path: A directory, or a single regular file.
    :type path: ``str``
    :param options: Options controlling error handling while walking.
    :type options: ``Optional[DiffOptions]``
    :returns: A ``DirectoryTree`` or a ``SingleFileTree``.
    :rtype: ``PlistTree``
    :raises: ``PlistDiffTreeAccessError`` if ``path`` cannot be accessed or
             is neither a directory nor a regular file.
    """
    options = options or DiffOptions()
    try:
        path_stat = os.stat(path)
    except OSError as err:
        raise PlistDiffTreeAccessError(
            f"Cannot access {path}: {err.strerror}"
        ) from err

    if stat.S_ISDIR(path_stat.st_mode):
        return DirectoryTree(path, options.ignore_permission_errors)

    if not stat.S_ISREG(path_stat.st_mode):
        raise PlistDiffTreeAccessError(
            f"{path} is neither a directory nor regular file"
        )

    try:
        with open(path, "rb") as fp:
            data = fp.read()
    except OSError as err:
        raise PlistDiffTreeAccessError(
            f"Cannot read {path}: {err.strerror}"
        ) from err
    return SingleFileTree(path, data)
