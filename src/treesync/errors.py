"""Exceptions raised by Tree Sync."""

from __future__ import annotations


class TreeSyncError(Exception):
    """Base class for all Tree Sync errors."""


class InvalidIdentifierError(TreeSyncError):
    """An identifier contains characters outside [A-Za-z0-9_-] or is empty."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid identifier: {name!r}")


class InvalidFilenameError(TreeSyncError):
    """One or more file or directory names are unsafe to materialize."""

    def __init__(self, paths: list[str] | tuple[str, ...], reason: str | None = None):
        self.paths = tuple(paths)
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Illegal names{detail}: {', '.join(self.paths)}")


class DuplicateNameError(TreeSyncError):
    """Names collide when compared case-insensitively."""

    def __init__(self, paths: list[str] | tuple[str, ...]):
        self.paths = tuple(paths)
        super().__init__(f"Case-insensitive duplicates: {', '.join(self.paths)}")


class HashMismatchError(TreeSyncError):
    """A file's contents do not match the digest it was shipped with."""

    def __init__(self, path: str, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Hash mismatch for {path}: expected {expected}, got {actual}")


class MalformedTreeError(TreeSyncError):
    """A tree record violates the node contract."""
