"""
Row-counting helpers shared by the SQLite-backed browser probes.

A StoreSpec describes one countable category inside a profile store; the
probe turns each non-empty spec into one artifact labeled with its row count
and carrying the row-level purge plan used at remediation time.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from core.artifacts import Artifact, PurgePlan, PurgeTarget
from core.enums import Category, Source
from core.exceptions import SchemaMissingError

from .._shared import StoreHandle, count_label, count_or_zero, file_size, scoped_label
from ..base import ProbeContext


@dataclass(frozen=True)
class StoreSpec:
    """
    One countable category inside a browser profile store.

    Attributes:
        category: Artifact category emitted
        filenames: Candidate store paths relative to the profile, newest layout first
        count_table: Table whose row count labels the artifact
        noun: (singular, plural) label noun
        purge: Row-level purge plan
        count_where: Optional filter for the count
        domain_column: When set, a per-domain breakdown is attached as children
    """
    category: Category
    filenames: Tuple[str, ...]
    count_table: str
    noun: Tuple[str, str]
    purge: PurgePlan
    count_where: Optional[str] = None
    domain_column: Optional[str] = None


def locate_store(profile: Path, spec: StoreSpec) -> Optional[Path]:
    for filename in spec.filenames:
        candidate = profile / filename
        if candidate.is_file():
            return candidate
    return None


def store_artifact(
    profile: Path,
    spec: StoreSpec,
    ctx: ProbeContext,
    source: Source,
    owner: str,
    scope: Optional[str] = None,
) -> Optional[Artifact]:
    """Count one spec inside ``profile``; None when the store is absent or empty."""
    store_path = locate_store(profile, spec)
    if store_path is None:
        return None
    ctx.callbacks.on_path(str(store_path))

    with ctx.open_store(store_path) as store:
        count = count_or_zero(store, spec.count_table, spec.count_where)
        if count == 0:
            return None
        artifact = Artifact(
            source=source,
            category=spec.category,
            location=store_path,
            size_bytes=file_size(store_path) or 0,
            label=scoped_label(owner, profile.name if scope is None else scope, count_label(count, spec.noun)),
            row_count=count,
            purge=spec.purge,
        )
        if spec.domain_column and ctx.config.cookie_breakdown:
            for child in domain_breakdown(
                store, artifact, spec.count_table, spec.domain_column, ctx.config.top_cookie_domains
            ):
                artifact.add_child(child)
    return artifact


def domain_breakdown(
    store: StoreHandle,
    parent: Artifact,
    table: str,
    column: str,
    limit: int,
) -> List[Artifact]:
    """Top domains by row count, as row-purge children of ``parent``."""
    if limit <= 0:
        return []
    statement = (
        f'SELECT "{column}" AS domain, COUNT(*) AS n FROM "{table}" '
        f'GROUP BY "{column}" ORDER BY n DESC, domain ASC LIMIT ?'
    )
    try:
        rows = list(store.query(statement, (limit,)))
    except SchemaMissingError:
        return []
    children = []
    for row in rows:
        domain = row["domain"]
        children.append(Artifact(
            source=parent.source,
            category=parent.category,
            location=parent.location,
            label=f"{(domain or '').lstrip('.') or '(no domain)'} ({count_label(row['n'], ('cookie', 'cookies'))})",
            row_count=row["n"],
            purge=PurgePlan((PurgeTarget(table, f'"{column}" IS ?', (domain,)),)),
        ))
    return children
