"""
Deletion safety guard.

Remediation only ever removes what a probe discovered, but a location is
still checked here before anything is deleted. A path is refused when it
is a protected location, lies inside a protected tree, or would take a
protected location with it (an ancestor of one).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional

from .logging import get_logger

LOGGER = get_logger("core.safety")

# Absolute, resolved against the system root
SYSTEM_PROTECTED_TREES = (
    "/System",
    "/Library/Apple",
    "/Library/Security",
    "/usr",
    "/bin",
    "/sbin",
    "/private/etc",
    "/private/var/db",
    "/private/var/root",
    "/Applications",
)

# Relative to the user's home directory
HOME_PROTECTED_TREES = (
    "Applications",
    "Library/Keychains",
    "Library/Mobile Documents",
    "Library/Application Support/iCloud",
    "Library/Application Support/1Password",
    "Library/Application Support/Bitwarden",
    "Library/Application Support/LastPass",
    "Library/Application Support/KeePassXC",
    "Library/Developer/Xcode/UserData",
    ".ssh",
    ".gnupg",
)

# User folders whose contents may hold artifacts but which are never removed themselves
HOME_PROTECTED_FOLDERS = (
    "Desktop",
    "Documents",
    "Downloads",
    "Movies",
    "Music",
    "Pictures",
    "Library",
)


def _normalize(path: Path) -> Path:
    return Path(os.path.abspath(os.path.expanduser(str(path))))


class SafetyGuard:
    """Decides whether a remediation target may be deleted."""

    def __init__(
        self,
        home: Path,
        system_root: Path = Path("/"),
        extra_protected: Optional[Iterable[Path]] = None,
    ):
        self.home = _normalize(home)
        root = _normalize(system_root)
        self._trees: List[Path] = [root / p.lstrip("/") for p in SYSTEM_PROTECTED_TREES]
        self._trees.extend(self.home / p for p in HOME_PROTECTED_TREES)
        self._trees.extend(_normalize(p) for p in extra_protected or ())
        # Removing any of these (or an ancestor) would take user data with it
        self._anchors: List[Path] = [root, self.home]
        self._anchors.extend(self.home / p for p in HOME_PROTECTED_FOLDERS)

    def protected_reason(self, path: Path) -> Optional[str]:
        """Why ``path`` must not be deleted, or None when it is safe."""
        target = _normalize(path)
        for tree in self._trees:
            if target == tree or target.is_relative_to(tree):
                return f"inside protected location {tree}"
            if tree.is_relative_to(target):
                return f"contains protected location {tree}"
        for anchor in self._anchors:
            if anchor.is_relative_to(target):
                return f"contains protected location {anchor}"
        return None

    def is_safe_to_delete(self, path: Path) -> bool:
        reason = self.protected_reason(path)
        if reason is not None:
            LOGGER.warning("Refusing to delete %s: %s", path, reason)
            return False
        return True
