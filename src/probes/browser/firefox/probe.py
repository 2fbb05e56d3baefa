"""
Firefox probe.

Each directory under a Profiles root is one profile. History and downloads
share places.sqlite with bookmarks, so both carry row-level purge plans;
saved logins live in logins.json and are removed as a file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from core.artifacts import Artifact
from core.enums import Category, Source
from core.logging import get_logger

from ..._shared import count_label, directory_size, enumerate_subdirectories, file_size, scoped_label
from ...base import BaseProbe, ProbeContext, ProbeMetadata
from .._stores import store_artifact
from ._patterns import (
    CACHE_DIR,
    FIREFOX_CACHE_ROOTS,
    FIREFOX_PROFILE_ROOTS,
    FIREFOX_STORES,
    LOGINS_FILE,
    SITE_DATA_DIRS,
)

LOGGER = get_logger("probes.browser.firefox")

DISPLAY_NAME = "Firefox"


class FirefoxProbe(BaseProbe):

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name="firefox",
            display_name=DISPLAY_NAME,
            source=Source.FIREFOX,
            categories=(
                Category.HISTORY,
                Category.DOWNLOADS,
                Category.COOKIES,
                Category.AUTOFILL,
                Category.CREDENTIALS,
                Category.SITE_DATA,
            ),
            description="History, downloads, cookies, form history, saved logins and site data",
        )

    def _cache_roots(self, ctx: ProbeContext) -> List[Path]:
        return [ctx.home / rel for rel in FIREFOX_CACHE_ROOTS]

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        profiles = enumerate_subdirectories(ctx.home / rel for rel in FIREFOX_PROFILE_ROOTS)
        return profiles + enumerate_subdirectories(self._cache_roots(ctx))

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        scope = _profile_scope(path)
        if any(path.is_relative_to(root) for root in self._cache_roots(ctx)):
            artifact = self._directory(path / CACHE_DIR, scope, "Disk cache", ctx)
            return [artifact] if artifact else []

        artifacts: List[Artifact] = []
        for spec in FIREFOX_STORES:
            if ctx.is_cancelled():
                return artifacts
            artifact = store_artifact(path, spec, ctx, Source.FIREFOX, DISPLAY_NAME, scope)
            if artifact is not None:
                artifacts.append(artifact)

        logins = self._logins(path / LOGINS_FILE, scope)
        if logins is not None:
            artifacts.append(logins)

        for rel, title in SITE_DATA_DIRS:
            if ctx.is_cancelled():
                break
            artifact = self._directory(path / rel, scope, title, ctx)
            if artifact is not None:
                artifacts.append(artifact)
        return artifacts

    def _logins(self, logins_path: Path, scope: str) -> Optional[Artifact]:
        if not logins_path.is_file():
            return None
        try:
            data = json.loads(logins_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            LOGGER.debug("Unreadable %s: %s", logins_path, exc)
            return None
        logins = data.get("logins") if isinstance(data, dict) else None
        if not logins:
            return None
        return Artifact(
            source=Source.FIREFOX,
            category=Category.CREDENTIALS,
            location=logins_path,
            size_bytes=file_size(logins_path) or 0,
            label=scoped_label(DISPLAY_NAME, scope, count_label(len(logins), ("saved login", "saved logins"))),
            row_count=len(logins),
        )

    def _directory(self, path: Path, scope: str, title: str, ctx: ProbeContext) -> Optional[Artifact]:
        size = directory_size(path, ctx.is_cancelled)
        if not size:
            return None
        return Artifact(
            source=Source.FIREFOX,
            category=Category.SITE_DATA,
            location=path,
            size_bytes=size,
            label=scoped_label(DISPLAY_NAME, scope, title),
        )


def _profile_scope(profile: Path) -> str:
    """``abcd1234.default-release`` -> ``default-release``."""
    _, _, suffix = profile.name.partition(".")
    return suffix or profile.name
