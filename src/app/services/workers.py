"""
Background workers for the presentation layer.

Both workers drive the PrivacyService off the GUI thread and report through
Qt signals, so widgets only ever touch results on the main thread.
"""

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import QThread, Signal

from core.logging import get_logger
from core.privacy_service import PrivacyService

_worker_logger = get_logger("app.services.workers")


class ScanWorker(QThread):
    """
    Background worker for one privacy scan.

    Signals:
        delta(object): ScanDelta for every finished probe and the terminal event
        progress(float, str): progress fraction, currently examined path
        finished_scan(str): final ScanState value ("completed" / "cancelled")
        error(str): unexpected failure message
    """

    delta = Signal(object)
    progress = Signal(float, str)
    finished_scan = Signal(str)
    error = Signal(str)

    def __init__(self, service: PrivacyService, parent=None):
        super().__init__(parent)
        self.service = service

    def cancel(self) -> None:
        """Request cooperative cancellation; results found so far are kept."""
        self.service.cancel_scan()

    def run(self) -> None:
        try:
            for delta in self.service.start_scan():
                self.delta.emit(delta)
                self.progress.emit(delta.progress, delta.current_path or "")
                if delta.done:
                    self.finished_scan.emit(delta.state.value)
        except Exception as exc:
            _worker_logger.exception("Scan worker failed")
            self.error.emit(str(exc))


class RemediationWorker(QThread):
    """
    Background worker for one remediation batch.

    Signals:
        finished_remediation(object): RemediationReport
        error(str): unexpected failure message
    """

    finished_remediation = Signal(object)
    error = Signal(str)

    def __init__(self, service: PrivacyService, artifact_ids: Optional[List[str]] = None, parent=None):
        super().__init__(parent)
        self.service = service
        self.artifact_ids = artifact_ids

    def run(self) -> None:
        try:
            report = self.service.remediate(self.artifact_ids)
        except Exception as exc:
            _worker_logger.exception("Remediation worker failed")
            self.error.emit(str(exc))
            return
        self.finished_remediation.emit(report)
