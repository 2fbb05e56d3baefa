"""
Privacy service facade.

The single entry point used by the GUI workers and the command-line runner:
start and cancel scans, edit the selection, and remediate. Each scan gets a
fresh ScanSession; the previous one is replaced, never mutated in place.
"""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, List, Optional

from probes.base import BaseProbe
from probes.probe_registry import ProbeRegistry
from remediation.engine import RemediationEngine, RemediationReport
from remediation.quiesce import ProcessRegistry, PsutilProcessRegistry, Quiescer
from remediation.shell_refresh import ShellRefresher

from .app_registry import ApplicationRegistry
from .artifacts import Artifact
from .catalog import ArtifactCatalog
from .config import AppConfig, RemediationConfig, ScanConfig
from .enums import Category
from .logging import get_logger
from .safety import SafetyGuard
from .scan_orchestrator import ScanDelta, ScanOrchestrator
from .session import ScanSession

LOGGER = get_logger("core.privacy_service")


class PrivacyService:
    """
    Facade over the scan orchestrator, the catalog and the remediation engine.

    Usage:
        service = PrivacyService.from_config(load_app_config(base_dir))
        for delta in service.start_scan():
            render(delta)
        service.deselect_all(Category.COOKIES)
        report = service.remediate(a.identity for a in service.catalog.selected_artifacts())
    """

    def __init__(
        self,
        probes: Optional[Iterable[BaseProbe]] = None,
        scan_config: Optional[ScanConfig] = None,
        remediation_config: Optional[RemediationConfig] = None,
        app_registry: Optional[ApplicationRegistry] = None,
        process_registry: Optional[ProcessRegistry] = None,
        shell_refresher: Optional[ShellRefresher] = None,
    ):
        self.scan_config = scan_config or ScanConfig()
        self.remediation_config = remediation_config or RemediationConfig()
        self.app_registry = app_registry or ApplicationRegistry(home=self.scan_config.home_dir)
        self.registry = ProbeRegistry(probes)
        self.orchestrator = ScanOrchestrator(self.registry.get_all(), self.scan_config, self.app_registry)
        self.engine = RemediationEngine(
            config=self.remediation_config,
            quiescer=Quiescer(
                process_registry or PsutilProcessRegistry(self.app_registry),
                grace_period=self.remediation_config.grace_period_seconds,
                force_terminate=self.remediation_config.force_terminate,
            ),
            shell_refresher=shell_refresher or ShellRefresher(
                self.scan_config.home_dir,
                sample_size=self.remediation_config.recent_items_sample_size,
            ),
            safety_guard=SafetyGuard(
                home=self.scan_config.home_dir,
                system_root=self.scan_config.system_root,
                extra_protected=self.remediation_config.protected_paths,
            ),
        )
        self._session = ScanSession()
        self._session_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig, **collaborators) -> "PrivacyService":
        return cls(scan_config=config.scan, remediation_config=config.remediation, **collaborators)

    @property
    def session(self) -> ScanSession:
        with self._session_lock:
            return self._session

    @property
    def catalog(self) -> ArtifactCatalog:
        return self.session.catalog

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def start_scan(self) -> Iterator[ScanDelta]:
        """Replace the session and stream incremental deltas until the terminal event."""
        session = ScanSession()
        with self._session_lock:
            self._session.cancel()
            self._session = session
        return self.orchestrator.run(session)

    def scan(self) -> ScanSession:
        """Blocking scan; returns the finished session."""
        for _ in self.start_scan():
            pass
        return self.session

    def cancel_scan(self) -> None:
        LOGGER.info("Scan cancellation requested")
        self.session.cancel()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_selection(self, artifact_id: str) -> Optional[bool]:
        return self.catalog.toggle(artifact_id)

    def select_all(self, category: Optional[Category] = None) -> int:
        return self.catalog.select_all(category)

    def deselect_all(self, category: Optional[Category] = None) -> int:
        return self.catalog.deselect_all(category)

    # ------------------------------------------------------------------
    # Remediation
    # ------------------------------------------------------------------

    def remediate(self, artifact_ids: Optional[Iterable[str]] = None) -> RemediationReport:
        """
        Remediate the given artifacts (default: the current selection).

        Cleaned artifacts are removed from the catalog; failed and skipped
        ones stay for a retry.
        """
        catalog = self.catalog
        if artifact_ids is None:
            targets: List[Artifact] = catalog.selected_artifacts()
        else:
            targets = []
            for artifact_id in artifact_ids:
                artifact = catalog.find(artifact_id)
                if artifact is None:
                    LOGGER.warning("Unknown artifact id %s", artifact_id)
                    continue
                targets.append(artifact)

        report = self.engine.remediate(targets)
        removed = catalog.remove(report.cleaned_ids)
        LOGGER.debug("Removed %d cleaned artifacts from the catalog", removed)
        return report
