"""
Application registry lookup.

Resolves bundle identifiers to display names and icons by reading the
``Info.plist`` of installed ``.app`` bundles.
"""

from __future__ import annotations

import plistlib
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .logging import get_logger

LOGGER = get_logger("core.app_registry")

DEFAULT_APPLICATION_DIRS = (
    "/Applications",
    "/Applications/Utilities",
    "/System/Applications",
    "/System/Applications/Utilities",
)


@dataclass(frozen=True)
class AppInfo:
    bundle_id: str
    display_name: str
    bundle_path: Path
    icon_path: Optional[Path] = None


def read_bundle_info(app_path: Path) -> Optional[AppInfo]:
    """Parse ``Contents/Info.plist`` of an application bundle."""
    plist_path = app_path / "Contents" / "Info.plist"
    try:
        with plist_path.open("rb") as handle:
            info = plistlib.load(handle)
    except (OSError, plistlib.InvalidFileException, ValueError) as exc:
        LOGGER.debug("Unreadable Info.plist in %s: %s", app_path, exc)
        return None

    bundle_id = info.get("CFBundleIdentifier")
    if not isinstance(bundle_id, str) or not bundle_id:
        return None

    display_name = (
        info.get("CFBundleDisplayName")
        or info.get("CFBundleName")
        or app_path.stem
    )

    icon_path = None
    icon_file = info.get("CFBundleIconFile")
    if isinstance(icon_file, str) and icon_file:
        candidate = app_path / "Contents" / "Resources" / icon_file
        if not candidate.suffix:
            candidate = candidate.with_suffix(".icns")
        if candidate.exists():
            icon_path = candidate

    return AppInfo(
        bundle_id=bundle_id,
        display_name=str(display_name),
        bundle_path=app_path,
        icon_path=icon_path,
    )


def bundle_path_for_executable(executable: str) -> Optional[Path]:
    """Return the outermost ``.app`` bundle that contains ``executable``."""
    parts = Path(executable).parts
    for index, part in enumerate(parts):
        if part.endswith(".app"):
            return Path(*parts[: index + 1])
    return None


class ApplicationRegistry:
    """
    Index of installed applications keyed by bundle identifier.

    The index is built lazily on first lookup and can be refreshed with
    ``invalidate()`` after applications are installed or removed.
    """

    def __init__(self, search_dirs: Optional[Iterable[Path]] = None, home: Optional[Path] = None):
        if search_dirs is None:
            dirs: List[Path] = [Path(d) for d in DEFAULT_APPLICATION_DIRS]
            dirs.append((home or Path.home()) / "Applications")
            search_dirs = dirs
        self._search_dirs = [Path(d) for d in search_dirs]
        self._index: Optional[Dict[str, AppInfo]] = None
        self._by_path: Dict[Path, Optional[AppInfo]] = {}
        self._lock = threading.Lock()

    def resolve(self, bundle_id: str) -> Optional[AppInfo]:
        """Look up an application by bundle identifier (case-insensitive)."""
        with self._lock:
            if self._index is None:
                self._index = self._build_index()
            return self._index.get(bundle_id.lower())

    def info_for_bundle(self, app_path: Path) -> Optional[AppInfo]:
        with self._lock:
            if app_path not in self._by_path:
                self._by_path[app_path] = read_bundle_info(app_path)
            return self._by_path[app_path]

    def bundle_id_for_executable(self, executable: str) -> Optional[str]:
        app_path = bundle_path_for_executable(executable)
        if app_path is None:
            return None
        info = self.info_for_bundle(app_path)
        return info.bundle_id if info else None

    def invalidate(self) -> None:
        with self._lock:
            self._index = None
            self._by_path.clear()

    def _build_index(self) -> Dict[str, AppInfo]:
        index: Dict[str, AppInfo] = {}
        for directory in self._search_dirs:
            try:
                bundles = sorted(p for p in directory.iterdir() if p.suffix == ".app")
            except OSError:
                continue
            for app_path in bundles:
                info = read_bundle_info(app_path)
                if info is not None:
                    index.setdefault(info.bundle_id.lower(), info)
        LOGGER.debug("Indexed %d applications", len(index))
        return index
