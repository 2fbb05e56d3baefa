"""
Error taxonomy for structured-store access and remediation.

Every failure that crosses the store boundary is one of these classes.
Unrecognised SQLite errors are classified as permission failures so that
callers fail closed and never delete on an ambiguous error.
"""

from __future__ import annotations

import errno
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .enums import ErrorKind

FULL_DISK_ACCESS_HINT = (
    "Grant Full Disk Access to PrivaSweep in System Settings > Privacy & Security"
)


class PrivaSweepError(Exception):
    """Base exception for PrivaSweep errors."""
    pass


class StoreError(PrivaSweepError):
    """Base exception for structured-store failures."""

    kind: ErrorKind = ErrorKind.PERMISSION_DENIED

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class StoreNotFoundError(StoreError):
    """Store file does not exist. Expected for most candidate locations."""
    kind = ErrorKind.NOT_FOUND


class SchemaMissingError(StoreError):
    """Store lacks an expected table or column."""
    kind = ErrorKind.SCHEMA_MISSING


class StoreLockedError(StoreError):
    """Store is held exclusively by a live process."""
    kind = ErrorKind.IN_USE


class StoreCorruptError(StoreError):
    """File is not a readable database."""
    kind = ErrorKind.CORRUPT


class StorePermissionError(StoreError):
    """Insufficient filesystem or OS privilege."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        hint: str = FULL_DISK_ACCESS_HINT,
    ):
        self.hint = hint
        super().__init__(message, path)


class PartialWriteError(StoreError):
    """Row-level delete affected fewer rows than were counted."""

    kind = ErrorKind.PARTIAL_WRITE

    def __init__(self, table: str, expected: int, affected: int, path=None):
        self.table = table
        self.expected = expected
        self.affected = affected
        super().__init__(
            f"Deleted {affected} of {expected} rows from {table}", path
        )


_LOCKED_MARKERS = ("database is locked", "database table is locked", "locking protocol")
_SCHEMA_MARKERS = ("no such table", "no such column")
_CORRUPT_MARKERS = ("file is not a database", "malformed", "file is encrypted")
_PERMISSION_MARKERS = ("unable to open", "readonly database", "attempt to write a readonly", "authorization denied")


def classify_sqlite_error(exc: sqlite3.Error, path: Optional[Union[str, Path]] = None) -> StoreError:
    """Map a sqlite3 exception onto the store taxonomy."""
    message = str(exc)
    lowered = message.lower()
    if any(marker in lowered for marker in _LOCKED_MARKERS):
        return StoreLockedError(message, path)
    if any(marker in lowered for marker in _SCHEMA_MARKERS):
        return SchemaMissingError(message, path)
    if any(marker in lowered for marker in _CORRUPT_MARKERS):
        return StoreCorruptError(message, path)
    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return StorePermissionError(message, path)
    return StorePermissionError(f"Unclassified store error: {message}", path)


def classify_os_error(exc: OSError) -> tuple[ErrorKind, str]:
    """Return (kind, hint) for a filesystem error raised while deleting."""
    if exc.errno in (errno.EBUSY, errno.ETXTBSY):
        return ErrorKind.IN_USE, "Quit the application that is using this file and retry"
    if exc.errno == errno.ENOENT:
        return ErrorKind.NOT_FOUND, ""
    return ErrorKind.PERMISSION_DENIED, FULL_DISK_ACCESS_HINT
