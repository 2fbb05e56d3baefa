"""
Targeted remediation of discovered artifacts.

- engine: batch processing, selection expansion, per-artifact outcomes
- strategies: row purge, file delete, and the skip-only kinds
- quiesce: stopping owning applications before their stores are mutated
- shell_refresh: Finder refresh after recent items are cleared
"""

from .engine import RemediationEngine, RemediationReport, expand_selection
from .quiesce import PsutilProcessRegistry, Quiescer, RunningProcess, belongs_to_family
from .shell_refresh import ShellRefresher
from .strategies import delete_path, purge_rows, remove_companions, strategy_for

__all__ = [
    "RemediationEngine",
    "RemediationReport",
    "expand_selection",
    "PsutilProcessRegistry",
    "Quiescer",
    "RunningProcess",
    "belongs_to_family",
    "ShellRefresher",
    "delete_path",
    "purge_rows",
    "remove_companions",
    "strategy_for",
]
