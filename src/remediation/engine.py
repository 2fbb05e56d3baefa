"""
Remediation engine.

Processes a batch of selected artifacts sequentially:

1. Expand the selection into remediation units. A unit whose whole subtree
   is selected is handled as one (its descendants share its outcome);
   otherwise only the selected descendants are handled.
2. Quiesce every affected source family once for the batch. A family that
   keeps running fails all of its units with IN_USE, without touching disk.
3. Apply each unit's strategy. Failures are recorded against that unit and
   never abort the batch.
4. Post-pass: refresh the shell when recent items were part of the batch.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

from core.artifacts import Artifact, Outcome, PurgePlan, PurgeTarget
from core.config import RemediationConfig
from core.enums import Category, ErrorKind, OutcomeStatus, Source
from core.exceptions import StoreError, StorePermissionError, classify_os_error
from core.logging import get_logger
from core.safety import SafetyGuard

from .quiesce import Quiescer
from .shell_refresh import ShellRefresher
from .strategies import StrategyContext, strategy_for

LOGGER = get_logger("remediation.engine")


class RemediationUnit(NamedTuple):
    """
    One strategy application.

    ``covered`` descendants share the unit's outcome. ``retained`` marks a
    store purged around deselected children, which stays in the catalog.
    """
    artifact: Artifact
    covered: Tuple[Artifact, ...]
    retained: bool = False


@dataclass
class RemediationReport:
    """
    Aggregate result of one remediation batch.

    ``failed_count`` counts remediation units; covered descendants repeat
    their unit's outcome and are not counted again.
    """
    outcomes: Dict[str, Outcome] = field(default_factory=dict)
    unit_ids: List[str] = field(default_factory=list)
    retained_ids: Set[str] = field(default_factory=set)

    @property
    def total_bytes_cleaned(self) -> int:
        return sum(outcome.bytes_cleaned for outcome in self.outcomes.values())

    @property
    def failed_count(self) -> int:
        return sum(1 for aid in self.unit_ids if self.outcomes[aid].status is OutcomeStatus.FAILED)

    @property
    def cleaned_ids(self) -> List[str]:
        return [aid for aid, outcome in self.outcomes.items() if outcome.ok and aid not in self.retained_ids]

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_bytes_cleaned": self.total_bytes_cleaned,
            "failed_count": self.failed_count,
            "outcomes": {
                aid: {
                    "status": outcome.status.value,
                    "reason": outcome.reason,
                    "error_kind": outcome.error_kind.value if outcome.error_kind else None,
                    "bytes_cleaned": outcome.bytes_cleaned,
                    "hint": outcome.hint,
                }
                for aid, outcome in self.outcomes.items()
            },
        }


def narrowed_purge(artifact: Artifact) -> Optional[PurgePlan]:
    """
    Purge plan for a store whose breakdown children are partly deselected.

    Every row of the store is purged except the rows of deselected children.
    Returns None unless each deselected child is a leaf with its own plan.
    """
    if artifact.purge is None:
        return None
    kept = [child for child in artifact.children if not child.selected]
    if not kept or any(child.purge is None or child.children for child in kept):
        return None

    targets: List[PurgeTarget] = []
    for target in artifact.purge.targets:
        clauses = [f"({target.where})"] if target.where else []
        params = list(target.params)
        spared_whole_table = False
        for child in kept:
            for spared in child.purge.targets:
                if spared.table != target.table:
                    continue
                if not spared.where:
                    spared_whole_table = True
                    continue
                clauses.append(f"NOT ({spared.where})")
                params.extend(spared.params)
        if spared_whole_table:
            continue
        targets.append(PurgeTarget(target.table, " AND ".join(clauses) or None, tuple(params)))
    return PurgePlan(tuple(targets))


def expand_selection(artifacts: Iterable[Artifact]) -> List[RemediationUnit]:
    """
    Turn requested artifacts into remediation units.

    A requested artifact is always treated as selected; below it the
    ``selected`` flags decide. Each artifact appears in at most one unit.
    A selected store with deselected breakdown children is purged as one
    unit that spares the deselected rows.
    """
    units: List[RemediationUnit] = []
    seen: Set[str] = set()
    for requested in artifacts:
        stack: List[Tuple[Artifact, bool]] = [(requested, True)]
        while stack:
            node, forced = stack.pop()
            if node.identity in seen:
                continue
            descendants = tuple(node.descendants())
            if forced or node.selected:
                if all(d.selected for d in descendants):
                    units.append(RemediationUnit(node, descendants))
                    seen.add(node.identity)
                    seen.update(d.identity for d in descendants)
                    continue
                plan = narrowed_purge(node)
                if plan is not None:
                    unit = dataclasses.replace(node, purge=plan, children=[])
                    units.append(RemediationUnit(unit, tuple(d for d in descendants if d.selected), retained=True))
                    seen.add(node.identity)
                    seen.update(d.identity for d in descendants)
                    continue
            stack.extend((child, False) for child in reversed(node.children))
    return units


class RemediationEngine:
    """Sequential, per-batch remediation with process quiescence."""

    def __init__(
        self,
        config: Optional[RemediationConfig] = None,
        quiescer: Optional[Quiescer] = None,
        shell_refresher: Optional[ShellRefresher] = None,
        safety_guard: Optional[SafetyGuard] = None,
    ):
        self.config = config or RemediationConfig()
        self.quiescer = quiescer
        self.shell_refresher = shell_refresher
        self.strategy_context = StrategyContext(
            store_timeout=self.config.store_timeout,
            vacuum_after_purge=self.config.vacuum_after_purge,
            safety_guard=safety_guard,
        )

    def remediate(self, artifacts: Sequence[Artifact]) -> RemediationReport:
        report = RemediationReport()
        units = expand_selection(artifacts)
        if not units:
            return report
        LOGGER.info("Remediating %d units", len(units))

        blocked = self._quiesce(units)

        for unit, covered, retained in units:
            strategy = strategy_for(unit)
            if strategy.touches_disk and blocked.get(unit.source):
                outcome = Outcome.failed(ErrorKind.IN_USE, blocked[unit.source])
            else:
                outcome = self._apply(unit, strategy)
            self._record(report, unit, covered, outcome, retained)

        if self._touches_recent_items(units):
            self._refresh_shell()

        LOGGER.info(
            "Remediation finished: %d bytes cleaned, %d failed",
            report.total_bytes_cleaned,
            report.failed_count,
        )
        return report

    def _quiesce(self, units: List[RemediationUnit]) -> Dict[Source, Optional[str]]:
        if self.quiescer is None:
            return {}
        sources = {u.artifact.source for u in units if strategy_for(u.artifact).touches_disk}
        return self.quiescer.quiesce(sorted(sources))

    def _apply(self, unit: Artifact, strategy) -> Outcome:
        try:
            return strategy.apply(unit, self.strategy_context)
        except StoreError as exc:
            hint = exc.hint if isinstance(exc, StorePermissionError) else ""
            LOGGER.warning("%s failed (%s): %s", unit.label, exc.kind.value, exc)
            return Outcome.failed(exc.kind, str(exc), hint)
        except OSError as exc:
            kind, hint = classify_os_error(exc)
            LOGGER.warning("%s failed (%s): %s", unit.label, kind.value, exc)
            return Outcome.failed(kind, str(exc), hint)

    @staticmethod
    def _record(
        report: RemediationReport,
        unit: Artifact,
        covered: Tuple[Artifact, ...],
        outcome: Outcome,
        retained: bool = False,
    ) -> None:
        report.outcomes[unit.identity] = outcome
        report.unit_ids.append(unit.identity)
        if retained:
            report.retained_ids.add(unit.identity)
        if covered:
            shared = dataclasses.replace(outcome, bytes_cleaned=0)
            for node in covered:
                report.outcomes[node.identity] = shared
        if outcome.status is OutcomeStatus.FAILED:
            LOGGER.warning("Failed: %s (%s)", unit.label, outcome.reason)
        else:
            LOGGER.info("%s: %s", outcome.status.value.capitalize(), unit.label)

    @staticmethod
    def _touches_recent_items(units: List[RemediationUnit]) -> bool:
        return any(u.artifact.category is Category.RECENT_ITEM for u in units)

    def _refresh_shell(self) -> None:
        if self.shell_refresher is None or not self.config.refresh_recent_items:
            return
        self.shell_refresher.refresh()
