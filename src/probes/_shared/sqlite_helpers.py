"""
Structured-store access for probes and row-level remediation.

Provides utilities for reading SQLite stores owned by other applications:
- Read-only, non-exclusive connections so a running browser is never blocked
- Optional copy-to-temp fallback when the owner holds an exclusive lock
- Classification of every sqlite3 failure into the store error taxonomy

Design Principle:
    Discovery never mutates a store. The only writable entry point is
    ``open_store(..., writable=True)``, used by the remediation engine for
    row-level purges inside an explicit transaction.
"""

from __future__ import annotations

import os
import shutil
import sqlite3
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from core.exceptions import (
    SchemaMissingError,
    StoreLockedError,
    StoreNotFoundError,
    StorePermissionError,
    classify_sqlite_error,
)
from core.logging import get_logger

LOGGER = get_logger("probes.sqlite")

COMPANION_SUFFIXES: Tuple[str, ...] = ("-wal", "-shm", "-journal")


class StoreHandle:
    """
    Open connection to a structured store.

    Handles are created by ``open_store`` and closed when its context exits,
    including when the caller is cancelled or raises.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path, writable: bool):
        self.conn = conn
        self.path = path
        self.writable = writable

    def query(self, statement: str, params: Sequence[Any] = ()) -> Iterator[sqlite3.Row]:
        """
        Execute a statement and return a lazy row iterator.

        Raises:
            SchemaMissingError: Table or column does not exist
            StoreError: Any other classified store failure
        """
        try:
            cursor = self.conn.execute(statement, tuple(params))
        except sqlite3.Error as e:
            raise classify_sqlite_error(e, self.path) from e
        return _iter_cursor(cursor, self.path)

    def scalar(self, statement: str, params: Sequence[Any] = ()) -> Any:
        row = next(self.query(statement, params), None)
        return row[0] if row is not None else None

    def table_names(self) -> List[str]:
        return [row["name"] for row in self.query(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )]

    def table_exists(self, table: str) -> bool:
        return self.scalar(
            "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?", (table,)
        ) > 0

    def count_rows(self, table: str, where: Optional[str] = None, params: Sequence[Any] = ()) -> int:
        """
        Count rows in ``table`` (optionally filtered).

        Raises:
            SchemaMissingError: If the table is absent
        """
        # Table names cannot be bound as parameters; existence is checked first
        if not self.table_exists(table):
            raise SchemaMissingError(f"no such table: {table}", self.path)
        statement = f'SELECT COUNT(*) FROM "{table}"'
        if where:
            statement += f" WHERE {where}"
        return int(self.scalar(statement, params) or 0)


def _iter_cursor(cursor: sqlite3.Cursor, path: Path) -> Iterator[sqlite3.Row]:
    try:
        for row in cursor:
            yield row
    except sqlite3.Error as e:
        raise classify_sqlite_error(e, path) from e
    finally:
        cursor.close()


def _store_uri(path: Path, writable: bool) -> str:
    mode = "rw" if writable else "ro"
    return f"{path.resolve().as_uri()}?mode={mode}"


def _connect(path: Path, writable: bool, timeout: float) -> sqlite3.Connection:
    conn = sqlite3.connect(
        _store_uri(path, writable),
        uri=True,
        timeout=timeout,
        isolation_level=None,  # explicit transactions only
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    try:
        # Forces the header read so corrupt or locked files fail here, not mid-query
        conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
    except sqlite3.Error:
        conn.close()
        raise
    return conn


@contextmanager
def open_store(
    db_path: Union[str, Path],
    writable: bool = False,
    timeout: float = 2.0,
    copy_on_lock: bool = False,
) -> Iterator[StoreHandle]:
    """
    Open a structured store.

    Args:
        db_path: Path to the SQLite database file
        writable: Open read-write (remediation only); default is read-only
        timeout: Busy timeout in seconds
        copy_on_lock: On a lock conflict, read a temporary copy instead
                      (ignored for writable handles)

    Yields:
        StoreHandle

    Raises:
        StoreNotFoundError: Path does not exist
        StoreLockedError: Store held exclusively by another process
        StoreCorruptError: File is not a database
        StorePermissionError: Insufficient privilege, or unclassified failure

    Example:
        with open_store(profile / "History") as store:
            visits = store.count_rows("visits")
    """
    db_path = Path(db_path)

    if not db_path.is_file():
        raise StoreNotFoundError(f"Store not found: {db_path}", db_path)
    if not os.access(db_path, os.R_OK):
        raise StorePermissionError(f"Store not readable: {db_path}", db_path)

    temp_copy: Optional[Path] = None
    try:
        conn = _connect(db_path, writable, timeout)
    except sqlite3.Error as e:
        error = classify_sqlite_error(e, db_path)
        if not (isinstance(error, StoreLockedError) and copy_on_lock and not writable):
            raise error from e
        LOGGER.debug("Store %s is locked, reading a temporary copy", db_path)
        temp_copy = copy_sqlite_for_reading(db_path)
        try:
            conn = _connect(temp_copy, False, timeout)
        except sqlite3.Error as copy_error:
            _remove_copy(temp_copy)
            raise classify_sqlite_error(copy_error, db_path) from copy_error

    handle = StoreHandle(conn, db_path, writable)
    try:
        yield handle
    finally:
        conn.close()
        if temp_copy is not None:
            _remove_copy(temp_copy)


def copy_sqlite_for_reading(
    db_path: Union[str, Path],
    include_wal: bool = True,
    dest_dir: Optional[Path] = None,
) -> Path:
    """
    Copy a store and its companion files to a temporary directory.

    Note:
        Caller is responsible for cleaning up the copied files.
    """
    db_path = Path(db_path)

    if dest_dir is None:
        dest_dir = Path(tempfile.mkdtemp(prefix="privasweep_store_"))
    else:
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)

    dest_db = dest_dir / db_path.name
    shutil.copy2(db_path, dest_db)

    if include_wal:
        for companion in companion_paths(db_path):
            if companion.exists():
                shutil.copy2(companion, dest_dir / companion.name)

    return dest_db


def _remove_copy(temp_copy: Path) -> None:
    shutil.rmtree(temp_copy.parent, ignore_errors=True)


def companion_paths(db_path: Union[str, Path]) -> List[Path]:
    """WAL, shared-memory and rollback-journal siblings of a store."""
    db_path = Path(db_path)
    return [db_path.with_name(db_path.name + suffix) for suffix in COMPANION_SUFFIXES]


def count_or_zero(store: StoreHandle, table: str, where: Optional[str] = None, params: Sequence[Any] = ()) -> int:
    """Row count, with a missing table or column downgraded to zero."""
    try:
        return store.count_rows(table, where, params)
    except SchemaMissingError:
        LOGGER.debug("Table %s missing in %s", table, store.path)
        return 0
