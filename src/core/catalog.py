"""
In-memory artifact catalog organised as a selection tree.

All mutations go through the lock handed in by the owning ScanSession so
that concurrent probes and the presentation layer never race.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .artifacts import Artifact
from .enums import Category
from .logging import get_logger

LOGGER = get_logger("core.catalog")


class ArtifactCatalog:
    """Ordered forest of artifacts discovered during one scan session."""

    def __init__(self, lock: Optional[threading.RLock] = None) -> None:
        self._lock = lock or threading.RLock()
        self._roots: List[Artifact] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def roots(self) -> List[Artifact]:
        with self._lock:
            return list(self._roots)

    def __len__(self) -> int:
        with self._lock:
            return len(self._roots)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.roots)

    def walk(self) -> List[Artifact]:
        """Every artifact in depth-first pre-order."""
        with self._lock:
            return [node for root in self._roots for node in root.walk()]

    def find(self, artifact_id: str) -> Optional[Artifact]:
        """Locate an artifact anywhere in the tree by depth-first search."""
        with self._lock:
            for root in self._roots:
                for node in root.walk():
                    if node.identity == artifact_id:
                        return node
        return None

    def by_category(self, category: Category) -> List[Artifact]:
        return [root for root in self.roots if root.category is category]

    def count(self, category: Category) -> int:
        return len(self.by_category(category))

    def total_size(self) -> int:
        return sum(root.size_bytes for root in self.roots)

    def selected_size(self) -> int:
        return sum(root.size_bytes for root in self.roots if root.selected)

    def selected_artifacts(self) -> List[Artifact]:
        """Top-most selected artifacts plus selected nodes under unselected parents."""
        picked: List[Artifact] = []
        with self._lock:
            stack = list(reversed(self._roots))
            while stack:
                node = stack.pop()
                if node.selected:
                    picked.append(node)
                else:
                    stack.extend(reversed(node.children))
        return picked

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def extend(self, artifacts: Iterable[Artifact]) -> List[Artifact]:
        """Append new root artifacts, skipping ids already present."""
        added: List[Artifact] = []
        with self._lock:
            known: Set[str] = {node.identity for root in self._roots for node in root.walk()}
            for artifact in artifacts:
                if artifact.identity in known:
                    LOGGER.debug("Skipping duplicate artifact %s", artifact.identity)
                    continue
                known.update(node.identity for node in artifact.walk())
                self._roots.append(artifact)
                added.append(artifact)
        return added

    def toggle(self, artifact_id: str) -> Optional[bool]:
        """
        Flip an artifact's selection; descendants follow the parent.

        Returns the new selection state, or None if the id is unknown.
        Children never propagate upward to their parent.
        """
        with self._lock:
            artifact = self.find(artifact_id)
            if artifact is None:
                return None
            artifact.set_selected(not artifact.selected)
            return artifact.selected

    def set_category_selected(self, category: Category, value: bool) -> int:
        """Select or deselect every artifact of a category. Returns the match count."""
        matched = 0
        with self._lock:
            for root in self._roots:
                for node in root.walk():
                    if node.category is category:
                        node.set_selected(value)
                        matched += 1
        return matched

    def select_all(self, category: Optional[Category] = None) -> int:
        if category is None:
            return self._set_all(True)
        return self.set_category_selected(category, True)

    def deselect_all(self, category: Optional[Category] = None) -> int:
        if category is None:
            return self._set_all(False)
        return self.set_category_selected(category, False)

    def _set_all(self, value: bool) -> int:
        with self._lock:
            for root in self._roots:
                root.set_selected(value)
            return len(self._roots)

    def remove(self, artifact_ids: Iterable[str]) -> int:
        """Remove artifacts (and their subtrees) wherever they sit in the tree."""
        doomed = set(artifact_ids)
        if not doomed:
            return 0
        removed = 0
        with self._lock:
            kept_roots = []
            for root in self._roots:
                if root.identity in doomed:
                    removed += 1
                else:
                    kept_roots.append(root)
            self._roots = kept_roots
            stack = list(self._roots)
            while stack:
                node = stack.pop()
                before = len(node.children)
                node.children = [child for child in node.children if child.identity not in doomed]
                removed += before - len(node.children)
                stack.extend(node.children)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._roots = []

    def index(self) -> Dict[str, Artifact]:
        return {node.identity: node for node in self.walk()}
