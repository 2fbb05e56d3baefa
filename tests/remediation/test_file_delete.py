"""Tests for whole-file and whole-directory removal."""

import os

import pytest

from core.artifacts import Artifact
from core.enums import Category, ErrorKind, OutcomeStatus, Source
from core.safety import SafetyGuard
from remediation.strategies import FILE_DELETE, StrategyContext, delete_path, remove_companions

needs_unprivileged = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0,
    reason="root ignores directory permissions",
)


@pytest.fixture()
def guarded(home, system_root):
    return StrategyContext(safety_guard=SafetyGuard(home, system_root))


class TestDeletePath:

    def test_file_with_companions(self, tmp_path):
        store = tmp_path / "Cookies"
        store.write_bytes(b"c" * 4096)
        for suffix in ("-wal", "-shm", "-journal"):
            (tmp_path / f"Cookies{suffix}").write_bytes(b"x")

        outcome = delete_path(store)

        assert outcome.status is OutcomeStatus.CLEANED
        assert outcome.bytes_cleaned == 4096
        assert list(tmp_path.iterdir()) == []

    def test_directory_tree(self, tmp_path):
        cache = tmp_path / "Cache"
        (cache / "index-dir").mkdir(parents=True)
        (cache / "data_1").write_bytes(b"a" * 1000)
        (cache / "index-dir" / "the-real-index").write_bytes(b"b" * 24)

        outcome = delete_path(cache)

        assert outcome.bytes_cleaned == 1024
        assert not cache.exists()

    def test_already_absent_counts_as_cleaned(self, tmp_path):
        outcome = delete_path(tmp_path / "missing.db")
        assert outcome.ok
        assert outcome.bytes_cleaned == 0
        assert outcome.reason == "already absent"

    def test_symlink_removed_target_kept(self, tmp_path):
        target = tmp_path / "real"
        target.mkdir()
        (target / "keep.txt").write_text("keep")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        assert delete_path(link).ok
        assert not os.path.lexists(link)
        assert (target / "keep.txt").exists()

    @needs_unprivileged
    def test_permission_denied(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        victim = locked / "History"
        victim.write_bytes(b"h")
        locked.chmod(0o500)
        try:
            outcome = delete_path(victim)
        finally:
            locked.chmod(0o700)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.error_kind is ErrorKind.PERMISSION_DENIED
        assert "Full Disk Access" in outcome.hint
        assert victim.exists()


class TestRemoveCompanions:

    def test_only_existing_companions_reported(self, tmp_path):
        store = tmp_path / "History"
        (tmp_path / "History-wal").write_bytes(b"w")
        results = remove_companions(store)
        assert results == [(tmp_path / "History-wal", None)]


class TestFileDeleteStrategy:

    def test_protected_location_refused(self, home, guarded):
        keychain = home / "Library/Keychains/login.keychain-db"
        keychain.parent.mkdir(parents=True)
        keychain.write_bytes(b"k")
        artifact = Artifact(Source.SAFARI, Category.CREDENTIALS, keychain, size_bytes=1)

        outcome = FILE_DELETE.apply(artifact, guarded)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.error_kind is ErrorKind.PERMISSION_DENIED
        assert outcome.reason == "protected location"
        assert keychain.exists()

    def test_user_folder_refused(self, home, guarded):
        (home / "Downloads").mkdir()
        outcome = FILE_DELETE.apply(Artifact(Source.SAFARI, Category.DOWNLOADS, home / "Downloads"), guarded)
        assert outcome.error_kind is ErrorKind.PERMISSION_DENIED
        assert (home / "Downloads").exists()

    def test_allowed_location_deleted(self, home, guarded):
        cache = home / "Library/Caches/com.apple.Safari"
        cache.mkdir(parents=True)
        (cache / "Cache.db").write_bytes(b"z" * 10)
        outcome = FILE_DELETE.apply(Artifact(Source.SAFARI, Category.SITE_DATA, cache), guarded)
        assert outcome.ok and outcome.bytes_cleaned == 10
        assert not cache.exists()
