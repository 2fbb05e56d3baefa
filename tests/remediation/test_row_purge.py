"""
Tests for row-level purges inside shared stores.

Covers:
- Every target deleted in one transaction; unrelated tables untouched
- Filtered targets with bound parameters
- Missing tables treated as already empty
- Rollback when a delete affects fewer rows than were counted
- Lock conflicts surfacing as StoreLockedError
"""

import sqlite3

import pytest

from core.artifacts import Artifact, PurgePlan, PurgeTarget
from core.enums import Category, ErrorKind, OutcomeStatus, Source
from core.exceptions import PartialWriteError, StoreLockedError
from remediation.strategies import (
    FILE_DELETE,
    NETWORK_IDENTITY,
    NETWORK_SKIP_REASON,
    PERMISSION_GRANT,
    ROW_PURGE,
    StrategyContext,
    purge_rows,
    strategy_for,
)

LOGIN_DDL = [
    "CREATE TABLE logins (id INTEGER PRIMARY KEY, origin_url TEXT)",
    "CREATE TABLE stats (id INTEGER PRIMARY KEY, hits INTEGER)",
    "CREATE TABLE meta (key TEXT, value TEXT)",
]


def rows(path, table):
    conn = sqlite3.connect(path)
    try:
        return conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]
    finally:
        conn.close()


@pytest.fixture()
def login_store(tmp_path, make_store):
    return make_store(tmp_path / "Login Data", LOGIN_DDL, {
        "logins": [(i, f"https://site{i}.example") for i in range(1, 11)],
        "stats": [(i, i) for i in range(1, 4)],
        "meta": [("version", "42")],
    })


class TestPurgeRows:

    def test_deletes_all_targets(self, login_store):
        deleted = purge_rows(login_store, PurgePlan.tables("logins", "stats"), timeout=0.2)
        assert deleted == 13
        assert rows(login_store, "logins") == 0
        assert rows(login_store, "stats") == 0
        assert rows(login_store, "meta") == 1

    def test_filtered_target(self, login_store):
        plan = PurgePlan((PurgeTarget("logins", "origin_url = ?", ("https://site3.example",)),))
        assert purge_rows(login_store, plan, timeout=0.2) == 1
        assert rows(login_store, "logins") == 9

    def test_missing_table_is_skipped(self, login_store):
        assert purge_rows(login_store, PurgePlan.tables("segments", "logins"), timeout=0.2) == 10

    def test_without_vacuum(self, login_store):
        assert purge_rows(login_store, PurgePlan.tables("stats"), timeout=0.2, vacuum=False) == 3

    def test_partial_delete_rolls_back_everything(self, login_store):
        conn = sqlite3.connect(login_store)
        conn.execute(
            "CREATE TRIGGER keep_first BEFORE DELETE ON logins "
            "WHEN old.id = 1 BEGIN SELECT RAISE(IGNORE); END"
        )
        conn.commit()
        conn.close()

        with pytest.raises(PartialWriteError) as excinfo:
            purge_rows(login_store, PurgePlan.tables("stats", "logins"), timeout=0.2)

        assert excinfo.value.kind is ErrorKind.PARTIAL_WRITE
        assert (excinfo.value.expected, excinfo.value.affected) == (10, 9)
        # the earlier stats delete was rolled back with it
        assert rows(login_store, "stats") == 3
        assert rows(login_store, "logins") == 10

    def test_locked_store(self, login_store):
        holder = sqlite3.connect(login_store, isolation_level=None)
        holder.execute("BEGIN EXCLUSIVE")
        try:
            with pytest.raises(StoreLockedError):
                purge_rows(login_store, PurgePlan.tables("logins"), timeout=0.1)
        finally:
            holder.execute("ROLLBACK")
            holder.close()
        assert rows(login_store, "logins") == 10


class TestRowPurgeStrategy:

    def test_reports_zero_bytes(self, login_store):
        artifact = Artifact(Source.CHROME, Category.CREDENTIALS, login_store, size_bytes=8192,
                            purge=PurgePlan.tables("logins"))
        outcome = ROW_PURGE.apply(artifact, StrategyContext(store_timeout=0.2))
        assert outcome.status is OutcomeStatus.CLEANED
        assert outcome.bytes_cleaned == 0
        assert outcome.reason == "10 rows deleted"
        assert login_store.exists()

    def test_absent_store(self, tmp_path):
        artifact = Artifact(Source.CHROME, Category.CREDENTIALS, tmp_path / "gone",
                            purge=PurgePlan.tables("logins"))
        outcome = ROW_PURGE.apply(artifact, StrategyContext())
        assert outcome.ok
        assert outcome.reason == "store already absent"


class TestStrategyDispatch:

    def test_dispatch(self, tmp_path):
        path = tmp_path / "x"
        assert strategy_for(Artifact(Source.SYSTEM, Category.PERMISSION_GRANT, path)) is PERMISSION_GRANT
        assert strategy_for(Artifact(Source.SYSTEM, Category.NETWORK_IDENTITY, path)) is NETWORK_IDENTITY
        assert strategy_for(Artifact(Source.CHROME, Category.COOKIES, path,
                                     purge=PurgePlan.tables("cookies"))) is ROW_PURGE
        assert strategy_for(Artifact(Source.SAFARI, Category.COOKIES, path)) is FILE_DELETE

    def test_network_identity_is_skipped(self, tmp_path):
        plist = tmp_path / "known-networks.plist"
        plist.write_bytes(b"x")
        outcome = NETWORK_IDENTITY.apply(Artifact(Source.SYSTEM, Category.NETWORK_IDENTITY, plist), StrategyContext())
        assert outcome.status is OutcomeStatus.SKIPPED
        assert outcome.reason == NETWORK_SKIP_REASON
        assert plist.exists()

    def test_skip_only_kinds_never_touch_disk(self):
        assert not PERMISSION_GRANT.touches_disk
        assert not NETWORK_IDENTITY.touches_disk
        assert ROW_PURGE.touches_disk and FILE_DELETE.touches_disk
