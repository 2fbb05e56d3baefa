"""
Process-scoped scan state.

A ScanSession holds the artifacts found so far, a monotonic progress
fraction, the cancellation flag and the "currently examining" cursor.
All mutable fields share one lock; the catalog is built on that same lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .artifacts import Artifact
from .catalog import ArtifactCatalog
from .enums import ScanState

PROGRESS_EPSILON = 0.01


@dataclass(frozen=True)
class SessionSnapshot:
    state: ScanState
    progress: float
    current_path: Optional[str]
    artifact_count: int


class ScanSession:
    """Mutable state for one logical scan. Replaced, never reused, on rescan."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._cancel_event = threading.Event()
        self.catalog = ArtifactCatalog(lock=self._lock)
        self._progress = 0.0
        self._current_path: Optional[str] = None
        self._state = ScanState.IDLE

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def progress(self) -> float:
        with self._lock:
            return self._progress

    @property
    def current_path(self) -> Optional[str]:
        with self._lock:
            return self._current_path

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    def begin(self) -> None:
        with self._lock:
            self.catalog.clear()
            self._cancel_event.clear()
            self._progress = PROGRESS_EPSILON
            self._current_path = None
            self._state = ScanState.SCANNING

    def finish(self) -> ScanState:
        with self._lock:
            self._progress = 1.0
            self._current_path = None
            self._state = ScanState.CANCELLED if self.is_cancelled() else ScanState.COMPLETED
            return self._state

    def merge(self, artifacts: Iterable[Artifact]) -> List[Artifact]:
        with self._lock:
            return self.catalog.extend(artifacts)

    def report_progress(self, fraction: float) -> float:
        """Raise progress to ``fraction``; progress never decreases and caps at 1.0."""
        with self._lock:
            self._progress = min(1.0, max(self._progress, fraction))
            return self._progress

    def set_cursor(self, path: Union[str, Path, None]) -> None:
        with self._lock:
            self._current_path = str(path) if path is not None else None

    def cancel(self) -> None:
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                state=self._state,
                progress=self._progress,
                current_path=self._current_path,
                artifact_count=len(self.catalog),
            )
