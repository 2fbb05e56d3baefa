"""
Scan orchestration.

Runs every registered probe concurrently and merges each probe's artifacts
into the session as soon as that probe finishes. ``ScanOrchestrator.run``
is a generator of ``ScanDelta`` events so callers can render results while
the scan is still in flight.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from probes.base import BaseProbe, ProbeContext

from .app_registry import ApplicationRegistry
from .artifacts import Artifact
from .config import ScanConfig
from .enums import ScanState
from .logging import get_logger
from .session import ScanSession

LOGGER = get_logger("core.scan_orchestrator")


@dataclass(frozen=True)
class ScanDelta:
    """
    One incremental scan event.

    Attributes:
        artifacts: Root artifacts merged into the catalog by this event
        progress: Session progress after the event, in [0, 1]
        current_path: "Currently examining" cursor
        probe_name: Probe that produced the event (None for start/terminal events)
        done: True only for the terminal event
        state: Session state after the event
        error: Probe failure message, if the probe raised
    """
    artifacts: Tuple[Artifact, ...]
    progress: float
    current_path: Optional[str] = None
    probe_name: Optional[str] = None
    done: bool = False
    state: ScanState = ScanState.SCANNING
    error: Optional[str] = None


class SessionCallbacks:
    """Probe callbacks bound to one scan session."""

    def __init__(self, session: ScanSession, probe_name: str):
        self._session = session
        self._probe_name = probe_name

    def on_path(self, path: str) -> None:
        self._session.set_cursor(path)

    def on_log(self, message: str, level: str = "info") -> None:
        log_method = getattr(LOGGER, level, LOGGER.info)
        log_method("[%s] %s", self._probe_name, message)

    def is_cancelled(self) -> bool:
        return self._session.is_cancelled()


class ScanOrchestrator:
    """Fan-out/fan-in driver for one scan over a fixed set of probes."""

    def __init__(
        self,
        probes: Sequence[BaseProbe],
        config: Optional[ScanConfig] = None,
        app_registry: Optional[ApplicationRegistry] = None,
    ):
        self.probes: List[BaseProbe] = list(probes)
        self.config = config or ScanConfig()
        self.app_registry = app_registry

    def run(self, session: ScanSession) -> Iterator[ScanDelta]:
        """
        Scan with every probe, yielding one delta per finished probe.

        The first event carries the initial epsilon progress; the last has
        ``done=True``, ``progress=1.0`` and the final state (Completed or
        Cancelled). Artifacts found before a cancellation are kept.
        """
        session.begin()
        yield self._delta(session)

        total = len(self.probes)
        LOGGER.info("Scan started with %d probes", total)
        if total:
            yield from self._fan_out(session, total)

        state = session.finish()
        LOGGER.info("Scan %s: %d artifacts", state.value, len(session.catalog))
        yield ScanDelta(artifacts=(), progress=session.progress, done=True, state=state)

    def run_to_completion(self, session: ScanSession) -> ScanState:
        """Drain ``run`` and return the final state."""
        state = session.state
        for delta in self.run(session):
            state = delta.state
        return state

    def _fan_out(self, session: ScanSession, total: int) -> Iterator[ScanDelta]:
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.config.max_workers, total)),
            thread_name_prefix="probe",
        )
        try:
            futures = {executor.submit(self._run_probe, probe, session): probe for probe in self.probes}
            for completed, future in enumerate(as_completed(futures), start=1):
                probe = futures[future]
                error = None
                try:
                    found = future.result()
                except Exception as exc:
                    # Probe failures degrade to "found nothing"
                    LOGGER.warning("Probe %s failed: %s", probe.name, exc)
                    LOGGER.debug("Probe %s traceback", probe.name, exc_info=True)
                    found, error = [], str(exc)
                added = session.merge(found)
                progress = session.report_progress(completed / total)
                LOGGER.debug("Probe %s finished: %d artifacts (%.0f%%)", probe.name, len(added), progress * 100)
                yield self._delta(session, added, probe.name, error)
        except GeneratorExit:
            # Consumer stopped listening; let in-flight probes wind down
            session.cancel()
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _run_probe(self, probe: BaseProbe, session: ScanSession) -> List[Artifact]:
        if session.is_cancelled():
            return []
        ctx = ProbeContext(
            config=self.config,
            callbacks=SessionCallbacks(session, probe.name),
            app_registry=self.app_registry,
        )
        return probe.run(ctx)

    @staticmethod
    def _delta(
        session: ScanSession,
        artifacts: Sequence[Artifact] = (),
        probe_name: Optional[str] = None,
        error: Optional[str] = None,
    ) -> ScanDelta:
        snapshot = session.snapshot()
        return ScanDelta(
            artifacts=tuple(artifacts),
            progress=snapshot.progress,
            current_path=snapshot.current_path,
            probe_name=probe_name,
            state=snapshot.state,
            error=error,
        )
