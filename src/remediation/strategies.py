"""
Remediation strategies, one per kind of artifact.

``strategy_for`` resolves an artifact to exactly one strategy:

- permission grants: read-only, log the intent and skip
- network identities: skip, removal needs the network configuration tool
- anything carrying a PurgePlan: row-level purge inside its shared store
- everything else: delete the file or directory, then its companions
"""

from __future__ import annotations

import os
import shutil
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from core.artifacts import Artifact, Outcome, PurgePlan
from core.enums import Category, ErrorKind
from core.exceptions import PartialWriteError, classify_os_error, classify_sqlite_error
from core.logging import get_logger
from core.safety import SafetyGuard
from probes._shared import companion_paths, open_store, path_size

LOGGER = get_logger("remediation.strategies")

PERMISSION_SKIP_REASON = "Permission grants are read-only; revoke them in System Settings > Privacy & Security"
NETWORK_SKIP_REASON = "requires network configuration tool"


@dataclass
class StrategyContext:
    """Settings shared by every strategy in one remediation batch."""
    store_timeout: float = 2.0
    vacuum_after_purge: bool = True
    safety_guard: Optional[SafetyGuard] = None


class RemediationStrategy:
    name = "base"

    def apply(self, artifact: Artifact, ctx: StrategyContext) -> Outcome:
        raise NotImplementedError

    @property
    def touches_disk(self) -> bool:
        return True


class PermissionGrantStrategy(RemediationStrategy):
    """
    No-op. The OS only offers a bulk reset that clears every application's
    grants (including this tool's own), so grants are never reset here.
    """
    name = "permission_noop"

    @property
    def touches_disk(self) -> bool:
        return False

    def apply(self, artifact: Artifact, ctx: StrategyContext) -> Outcome:
        for node in artifact.walk():
            if node.grant is not None:
                LOGGER.info(
                    "Would revoke %s for %s (%s); grants are left unchanged",
                    node.grant.service_label,
                    node.grant.owner_display_name,
                    node.grant.owner_bundle_id,
                )
        return Outcome.skipped(PERMISSION_SKIP_REASON)


class NetworkIdentityStrategy(RemediationStrategy):
    name = "network_skip"

    @property
    def touches_disk(self) -> bool:
        return False

    def apply(self, artifact: Artifact, ctx: StrategyContext) -> Outcome:
        LOGGER.info("Skipping %s: %s", artifact.label, NETWORK_SKIP_REASON)
        return Outcome.skipped(NETWORK_SKIP_REASON)


class RowPurgeStrategy(RemediationStrategy):
    """Delete targeted rows inside a shared store; the file stays in place."""
    name = "row_purge"

    def apply(self, artifact: Artifact, ctx: StrategyContext) -> Outcome:
        if artifact.purge is None:
            raise ValueError(f"{artifact.label} has no purge plan")
        if not artifact.location.exists():
            return Outcome.cleaned(reason="store already absent")
        deleted = purge_rows(artifact.location, artifact.purge, ctx.store_timeout, ctx.vacuum_after_purge)
        LOGGER.info("Purged %d rows from %s", deleted, artifact.location)
        return Outcome.cleaned(reason=f"{deleted} rows deleted")


class FileDeleteStrategy(RemediationStrategy):
    name = "file_delete"

    def apply(self, artifact: Artifact, ctx: StrategyContext) -> Outcome:
        path = artifact.location
        if ctx.safety_guard is not None:
            reason = ctx.safety_guard.protected_reason(path)
            if reason is not None:
                LOGGER.warning("Refusing to delete %s: %s", path, reason)
                return Outcome.failed(ErrorKind.PERMISSION_DENIED, "protected location")
        return delete_path(path)


def purge_rows(db_path: Path, plan: PurgePlan, timeout: float = 2.0, vacuum: bool = True) -> int:
    """
    Apply a purge plan inside one IMMEDIATE transaction.

    A missing table counts as already empty. If any delete affects fewer
    rows than were counted, the whole transaction is rolled back.

    Returns:
        Total rows deleted

    Raises:
        StoreLockedError: Store is held by another process
        PartialWriteError: Fewer rows deleted than counted; nothing committed
        StoreError: Any other classified store failure
    """
    with open_store(db_path, writable=True, timeout=timeout) as store:
        conn = store.conn
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise classify_sqlite_error(e, db_path) from e

        deleted = 0
        try:
            for target in plan.targets:
                if not store.table_exists(target.table):
                    LOGGER.debug("Table %s absent in %s", target.table, db_path)
                    continue
                expected = store.count_rows(target.table, target.where, target.params)
                statement = f'DELETE FROM "{target.table}"'
                if target.where:
                    statement += f" WHERE {target.where}"
                try:
                    affected = conn.execute(statement, tuple(target.params)).rowcount
                except sqlite3.Error as e:
                    raise classify_sqlite_error(e, db_path) from e
                if affected < expected:
                    raise PartialWriteError(target.table, expected, affected, db_path)
                deleted += affected
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

        if vacuum and deleted:
            try:
                conn.execute("VACUUM")
            except sqlite3.Error as e:
                LOGGER.debug("VACUUM skipped for %s: %s", db_path, e)
    return deleted


def remove_companions(path: Path) -> List[Tuple[Path, Optional[str]]]:
    """
    Remove WAL, shared-memory and journal siblings of ``path``.

    Every companion is attempted; returns (path, error) pairs where error is
    None on success.
    """
    results: List[Tuple[Path, Optional[str]]] = []
    for companion in companion_paths(path):
        if not os.path.lexists(companion):
            continue
        try:
            companion.unlink()
            results.append((companion, None))
        except OSError as exc:
            LOGGER.debug("Could not remove companion %s: %s", companion, exc)
            results.append((companion, str(exc)))
    return results


def delete_path(path: Path) -> Outcome:
    """Delete a file or directory tree, then verify it is gone."""
    if not os.path.lexists(path):
        remove_companions(path)
        return Outcome.cleaned(reason="already absent")

    size = path_size(path) or 0
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        kind, hint = classify_os_error(exc)
        LOGGER.warning("Failed to delete %s: %s", path, exc)
        return Outcome.failed(kind, str(exc), hint)

    remove_companions(path)
    if os.path.lexists(path):
        return Outcome.failed(ErrorKind.PERMISSION_DENIED, "path still present after delete")
    LOGGER.info("Deleted %s (%d bytes)", path, size)
    return Outcome.cleaned(bytes_cleaned=size)


PERMISSION_GRANT = PermissionGrantStrategy()
NETWORK_IDENTITY = NetworkIdentityStrategy()
ROW_PURGE = RowPurgeStrategy()
FILE_DELETE = FileDeleteStrategy()

CATEGORY_STRATEGIES: Dict[Category, RemediationStrategy] = {
    Category.PERMISSION_GRANT: PERMISSION_GRANT,
    Category.NETWORK_IDENTITY: NETWORK_IDENTITY,
}


def strategy_for(artifact: Artifact) -> RemediationStrategy:
    if artifact.category in CATEGORY_STRATEGIES:
        return CATEGORY_STRATEGIES[artifact.category]
    if not artifact.is_file_backed:
        return PERMISSION_GRANT
    if artifact.purge is not None:
        return ROW_PURGE
    return FILE_DELETE
