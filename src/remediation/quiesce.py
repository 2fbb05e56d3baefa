"""
Quiescence: stop the owning applications before their stores are mutated.

Family membership is strict. A running process belongs to a family only if
its bundle identifier equals one of the family's identifiers or is a dotted
child of one (``com.google.Chrome.helper`` belongs to ``com.google.Chrome``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import psutil

from core.app_registry import ApplicationRegistry
from core.enums import Source
from core.logging import get_logger
from probes.browser.chromium import CHROMIUM_BROWSERS
from probes.browser.firefox._patterns import FIREFOX_BUNDLE_IDS
from probes.browser.safari._patterns import SAFARI_BUNDLE_IDS
from probes.chat import CHAT_APPS

LOGGER = get_logger("remediation.quiesce")


def _family_bundle_ids() -> Dict[Source, Tuple[str, ...]]:
    families: Dict[Source, Tuple[str, ...]] = {
        Source.SAFARI: tuple(SAFARI_BUNDLE_IDS),
        Source.FIREFOX: tuple(FIREFOX_BUNDLE_IDS),
        Source.SYSTEM: (),
    }
    for info in list(CHROMIUM_BROWSERS.values()) + list(CHAT_APPS.values()):
        families[info["source"]] = tuple(info["bundle_ids"])
    return families


SOURCE_BUNDLE_IDS: Dict[Source, Tuple[str, ...]] = _family_bundle_ids()


def belongs_to_family(bundle_id: str, family_ids: Iterable[str]) -> bool:
    """Bundle identifier equality, or a dotted child of a family identifier."""
    return any(bundle_id == fid or bundle_id.startswith(fid + ".") for fid in family_ids)


@dataclass(frozen=True)
class RunningProcess:
    bundle_id: str
    pid: int
    name: str = ""


class ProcessRegistry(Protocol):
    """Running-process collaborator used by the quiescer."""

    def list_running(self) -> List[RunningProcess]:
        ...

    def terminate(self, pid: int, forced: bool = False) -> bool:
        """Signal ``pid``; False when the signal could not be delivered."""
        ...

    def wait(self, pids: Sequence[int], timeout: float) -> List[int]:
        """Wait up to ``timeout`` seconds; return the pids still alive."""
        ...


class PsutilProcessRegistry:
    """Process registry backed by psutil and the application registry."""

    def __init__(self, app_registry: Optional[ApplicationRegistry] = None):
        self.app_registry = app_registry or ApplicationRegistry()

    def list_running(self) -> List[RunningProcess]:
        own_pid = os.getpid()
        running = []
        for proc in psutil.process_iter(["pid", "name", "exe"]):
            try:
                info = proc.info
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            exe = info.get("exe")
            if not exe or info["pid"] == own_pid:
                continue
            bundle_id = self.app_registry.bundle_id_for_executable(exe)
            if bundle_id:
                running.append(RunningProcess(bundle_id=bundle_id, pid=info["pid"], name=info.get("name") or ""))
        return running

    def terminate(self, pid: int, forced: bool = False) -> bool:
        try:
            proc = psutil.Process(pid)
            if forced:
                proc.kill()
            else:
                proc.terminate()
        except psutil.NoSuchProcess:
            return True
        except psutil.AccessDenied:
            LOGGER.warning("Not permitted to signal pid %d", pid)
            return False
        return True

    def wait(self, pids: Sequence[int], timeout: float) -> List[int]:
        procs = []
        for pid in pids:
            try:
                procs.append(psutil.Process(pid))
            except psutil.NoSuchProcess:
                continue
        if not procs:
            return []
        _, alive = psutil.wait_procs(procs, timeout=timeout)
        return [proc.pid for proc in alive]


class Quiescer:
    """
    Terminates the running owners of a set of source families, once per batch.

    Graceful termination first; after the grace period, survivors are
    force-terminated (when allowed) and waited on once more.
    """

    def __init__(
        self,
        registry: ProcessRegistry,
        grace_period: float = 3.0,
        force_terminate: bool = True,
        family_ids: Optional[Dict[Source, Tuple[str, ...]]] = None,
    ):
        self.registry = registry
        self.grace_period = grace_period
        self.force_terminate = force_terminate
        self.family_ids = SOURCE_BUNDLE_IDS if family_ids is None else family_ids

    def quiesce(self, sources: Iterable[Source]) -> Dict[Source, Optional[str]]:
        """
        Stop every family in ``sources``.

        Returns a map of source to failure reason (None when the family is
        no longer running).
        """
        wanted = {source: self.family_ids.get(source, ()) for source in sources}
        results: Dict[Source, Optional[str]] = {source: None for source in wanted}
        if not any(wanted.values()):
            return results

        running = self.registry.list_running()
        for source, ids in wanted.items():
            procs = [proc for proc in running if ids and belongs_to_family(proc.bundle_id, ids)]
            if not procs:
                continue
            LOGGER.info("Closing %s (%d processes)", source.display_name, len(procs))
            survivors = self._stop(procs)
            if survivors:
                names = ", ".join(sorted({p.name or p.bundle_id for p in survivors}))
                results[source] = f"{source.display_name} is still running ({names})"
                LOGGER.warning("Could not quiesce %s: %s", source.display_name, names)
        return results

    def _stop(self, procs: List[RunningProcess]) -> List[RunningProcess]:
        by_pid = {proc.pid: proc for proc in procs}
        for pid in by_pid:
            self.registry.terminate(pid, forced=False)
        alive = self.registry.wait(list(by_pid), self.grace_period)
        if alive and self.force_terminate:
            for pid in alive:
                self.registry.terminate(pid, forced=True)
            alive = self.registry.wait(alive, self.grace_period)
        return [by_pid[pid] for pid in alive if pid in by_pid]
