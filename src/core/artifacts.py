"""
Artifact data model.

An Artifact is one discovered unit of removable or auditable personal data.
Artifacts form a tree (a parent may own per-domain or per-service children)
and carry everything the remediation engine needs to decide how to remove
them: a filesystem location, an optional row-level purge plan, or a
read-only permission grant.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .enums import Category, ErrorKind, OutcomeStatus, Source


@dataclass(frozen=True)
class PurgeTarget:
    """One row-level delete: ``DELETE FROM table [WHERE where]``."""
    table: str
    where: Optional[str] = None
    params: Tuple[object, ...] = ()


@dataclass(frozen=True)
class PurgePlan:
    """Row-level purge for an artifact held inside a shared structured store."""
    targets: Tuple[PurgeTarget, ...]

    @classmethod
    def tables(cls, *tables: str) -> "PurgePlan":
        return cls(tuple(PurgeTarget(table) for table in tables))


@dataclass(frozen=True)
class PermissionGrant:
    """Active capability grant read from the permission registry. Never file-backed."""
    owner_bundle_id: str
    owner_display_name: str
    service_kind: str
    service_label: str
    service_category: str  # "Privacy" | "Other"
    granted_at: Optional[datetime] = None
    registry_path: Optional[Path] = None
    icon_path: Optional[Path] = None


@dataclass(eq=False)
class Artifact:
    """
    A discovered unit of personal data.

    Attributes:
        source: Owning application family
        category: Artifact kind
        location: Filesystem path (registry path for permission grants)
        size_bytes: Best-effort size; 0 when nothing is file-backed
        label: Human readable description, may embed a count
        selected: Selection state, defaults to True
        children: Ordered child artifacts (tree, never a graph)
        row_count: Number of rows/entries when counted from a store
        purge: Row-level purge plan; None means whole-file removal
        grant: Set only for permission-grant artifacts
        identity: Opaque id, unique within one scan session
    """
    source: Source
    category: Category
    location: Path
    size_bytes: int = 0
    label: str = ""
    selected: bool = True
    children: List["Artifact"] = field(default_factory=list)
    row_count: Optional[int] = None
    purge: Optional[PurgePlan] = None
    grant: Optional[PermissionGrant] = None
    identity: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must not be negative: {self.size_bytes}")
        self.location = Path(self.location)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_file_backed(self) -> bool:
        return self.category is not Category.PERMISSION_GRANT and self.grant is None

    def add_child(self, child: "Artifact") -> None:
        if any(node is self for node in child.walk()) or any(node is child for node in self.walk()):
            raise ValueError("Artifact children must form a tree")
        self.children.append(child)

    def walk(self) -> Iterator["Artifact"]:
        """Depth-first pre-order traversal of this artifact and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants(self) -> Iterator["Artifact"]:
        nodes = self.walk()
        next(nodes)
        yield from nodes

    def set_selected(self, value: bool) -> None:
        """Set selection on this artifact and force every descendant to match."""
        for node in self.walk():
            node.selected = value

    def fully_selected(self) -> bool:
        return all(node.selected for node in self.walk())


@dataclass(frozen=True)
class Outcome:
    """Remediation result for a single artifact."""
    status: OutcomeStatus
    reason: str = ""
    error_kind: Optional[ErrorKind] = None
    bytes_cleaned: int = 0
    hint: str = ""

    @classmethod
    def cleaned(cls, bytes_cleaned: int = 0, reason: str = "") -> "Outcome":
        return cls(OutcomeStatus.CLEANED, reason=reason, bytes_cleaned=bytes_cleaned)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, kind: ErrorKind, reason: str, hint: str = "") -> "Outcome":
        return cls(OutcomeStatus.FAILED, reason=reason, error_kind=kind, hint=hint)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.CLEANED
