"""
Filesystem helpers for probes.

Provides utilities for sizing and locating candidate data:
- Best-effort file and recursive directory sizes
- Profile enumeration for multi-profile browsers
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Callable, Iterable, List, Optional

_PROFILE_NUMBER = re.compile(r"^Profile (\d+)$")


def file_size(path: Path) -> Optional[int]:
    """Size of a regular file, or None if it cannot be read."""
    try:
        st = path.stat()
    except OSError:
        return None
    return st.st_size


def directory_size(path: Path, is_cancelled: Optional[Callable[[], bool]] = None) -> Optional[int]:
    """
    Recursive size of a directory, or None if it does not exist.

    Symlinks are not followed; unreadable entries are skipped.
    """
    if not path.is_dir():
        return None
    total = 0
    for dirpath, _, filenames in os.walk(path, onerror=lambda _err: None):
        if is_cancelled is not None and is_cancelled():
            break
        for name in filenames:
            fp = os.path.join(dirpath, name)
            try:
                st = os.lstat(fp)
            except OSError:
                continue
            if not os.path.islink(fp):
                total += st.st_size
    return total


def path_size(path: Path, is_cancelled: Optional[Callable[[], bool]] = None) -> Optional[int]:
    if path.is_dir():
        return directory_size(path, is_cancelled)
    return file_size(path)


def enumerate_chromium_profiles(root: Path) -> List[Path]:
    """
    Profile directories under a Chromium user-data root.

    Returns ``Default`` first, then ``Profile N`` in numeric order.
    """
    if not root.is_dir():
        return []
    numbered = []
    default = None
    try:
        entries = list(root.iterdir())
    except OSError:
        return []
    for entry in entries:
        if not entry.is_dir():
            continue
        if entry.name == "Default":
            default = entry
            continue
        match = _PROFILE_NUMBER.match(entry.name)
        if match:
            numbered.append((int(match.group(1)), entry))
    profiles = [default] if default is not None else []
    profiles.extend(entry for _, entry in sorted(numbered))
    return profiles


def enumerate_subdirectories(roots: Iterable[Path]) -> List[Path]:
    """Immediate subdirectories of each existing root, sorted by name."""
    found: List[Path] = []
    for root in roots:
        if not root.is_dir():
            continue
        try:
            found.extend(sorted(p for p in root.iterdir() if p.is_dir()))
        except OSError:
            continue
    return found


def under_home(home: Path, relative: str) -> Path:
    return home / relative


def under_root(system_root: Path, absolute: str) -> Path:
    """Resolve an absolute system path against a (possibly relocated) root."""
    return system_root / absolute.lstrip("/")
