import sqlite3
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from core.config import RemediationConfig, ScanConfig
from probes.base import ProbeContext
from remediation.quiesce import RunningProcess


@pytest.fixture()
def home(tmp_path: Path) -> Path:
    """Empty home directory for one test."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture()
def system_root(tmp_path: Path) -> Path:
    """Relocated system root so system-scope probes never touch the real disk."""
    path = tmp_path / "root"
    path.mkdir()
    return path


@pytest.fixture()
def scan_config(home: Path, system_root: Path) -> ScanConfig:
    return ScanConfig(
        max_workers=2,
        top_cookie_domains=100,
        cookie_breakdown=True,
        copy_locked_stores=False,
        store_timeout=0.2,
        home_dir=home,
        system_root=system_root,
    )


@pytest.fixture()
def remediation_config() -> RemediationConfig:
    return RemediationConfig(
        grace_period_seconds=0.05,
        force_terminate=True,
        vacuum_after_purge=True,
        refresh_recent_items=True,
        recent_items_sample_size=5,
        store_timeout=0.2,
    )


@pytest.fixture()
def probe_ctx(scan_config: ScanConfig) -> ProbeContext:
    return ProbeContext(config=scan_config)


@pytest.fixture()
def make_store():
    """
    Factory creating a SQLite store from DDL and rows.

    Usage:
        make_store(path, ["CREATE TABLE t (x)"], {"t": [(1,), (2,)]})
    """

    def _make(path: Path, ddl: Iterable[str], rows: Optional[Dict[str, Sequence[tuple]]] = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path)
        try:
            for statement in ddl:
                conn.execute(statement)
            for table, values in (rows or {}).items():
                if not values:
                    continue
                placeholders = ", ".join("?" for _ in values[0])
                conn.executemany(f'INSERT INTO "{table}" VALUES ({placeholders})', values)
            conn.commit()
        finally:
            conn.close()
        return path

    return _make


CHROMIUM_HISTORY_DDL = [
    "CREATE TABLE urls (id INTEGER PRIMARY KEY, url TEXT, title TEXT)",
    "CREATE TABLE visits (id INTEGER PRIMARY KEY, url INTEGER, visit_time INTEGER)",
    "CREATE TABLE keyword_search_terms (keyword_id INTEGER, url_id INTEGER, term TEXT)",
    "CREATE TABLE downloads (id INTEGER PRIMARY KEY, target_path TEXT)",
    "CREATE TABLE downloads_url_chains (id INTEGER, chain_index INTEGER, url TEXT)",
]


@pytest.fixture()
def chrome_profile(home: Path, make_store):
    """Factory for a Chrome profile directory with a History store."""

    def _make(
        name: str = "Default",
        visits: int = 0,
        downloads: int = 0,
    ) -> Path:
        profile = home / "Library/Application Support/Google/Chrome" / name
        profile.mkdir(parents=True, exist_ok=True)
        make_store(
            profile / "History",
            CHROMIUM_HISTORY_DDL,
            {
                "urls": [(i, f"https://site{i}.example/", f"Site {i}") for i in range(1, visits + 1)],
                "visits": [(i, i, 13_000_000_000 + i) for i in range(1, visits + 1)],
                "downloads": [(i, f"/Users/me/Downloads/file{i}") for i in range(1, downloads + 1)],
            },
        )
        return profile

    return _make


class FakeProcessRegistry:
    """
    In-memory running-process registry.

    Processes listed in ``stubborn`` ignore every termination request.
    """

    def __init__(self, running: Optional[List[RunningProcess]] = None, stubborn: Iterable[int] = ()):
        self.running = list(running or [])
        self.stubborn = set(stubborn)
        self.signals: List[tuple] = []
        self.list_calls = 0

    def list_running(self) -> List[RunningProcess]:
        self.list_calls += 1
        return list(self.running)

    def terminate(self, pid: int, forced: bool = False) -> bool:
        self.signals.append((pid, forced))
        if pid in self.stubborn:
            return False
        self.running = [p for p in self.running if p.pid != pid]
        return True

    def wait(self, pids: Sequence[int], timeout: float) -> List[int]:
        alive = {p.pid for p in self.running}
        return [pid for pid in pids if pid in alive]


@pytest.fixture()
def process_registry() -> FakeProcessRegistry:
    return FakeProcessRegistry()


@pytest.fixture()
def fake_processes():
    """The FakeProcessRegistry class, for tests that need running processes."""
    return FakeProcessRegistry


class RecordingRefresher:
    def __init__(self):
        self.calls = 0

    def refresh(self) -> int:
        self.calls += 1
        return 0


@pytest.fixture()
def shell_refresher() -> RecordingRefresher:
    return RecordingRefresher()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in ("PRIVASWEEP_MAX_WORKERS", "PRIVASWEEP_GRACE_PERIOD", "PRIVASWEEP_HOME"):
        monkeypatch.delenv(name, raising=False)
