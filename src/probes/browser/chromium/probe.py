"""
Chromium family probe.

For each profile (``Default`` and ``Profile N``) under every known user-data
root, counts rows in the History, Cookies, Login Data and Web Data stores and
emits one artifact per non-empty category. Cookie artifacts carry a bounded
"top domains" breakdown as child artifacts. Cache and web-storage directories
are emitted as whole-directory artifacts.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from core.artifacts import Artifact
from core.enums import Category
from core.logging import get_logger

from ..._shared import directory_size, enumerate_chromium_profiles, scoped_label
from ...base import BaseProbe, ProbeContext, ProbeMetadata
from .._stores import store_artifact
from ._patterns import CHROMIUM_BROWSERS, CHROMIUM_SITE_DATA_DIRS, CHROMIUM_STORES

LOGGER = get_logger("probes.browser.chromium")


class ChromiumProbe(BaseProbe):
    """Probe for one Chromium-based browser (Chrome, Edge, Brave)."""

    def __init__(self, browser: str = "chrome"):
        if browser not in CHROMIUM_BROWSERS:
            raise ValueError(f"Unknown Chromium browser: {browser}")
        self.browser = browser
        self._info = CHROMIUM_BROWSERS[browser]

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name=f"chromium_{self.browser}",
            display_name=self._info["display_name"],
            source=self._info["source"],
            categories=tuple(spec.category for spec in CHROMIUM_STORES) + (Category.SITE_DATA,),
            description="History, downloads, cookies, saved passwords, autofill and site data",
        )

    def _cache_roots(self, ctx: ProbeContext) -> List[Path]:
        return [ctx.home / rel for rel in self._info["cache_roots"]]

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        locations: List[Path] = []
        for rel in self._info["profile_roots"]:
            locations.extend(enumerate_chromium_profiles(ctx.home / rel))
        for root in self._cache_roots(ctx):
            locations.extend(enumerate_chromium_profiles(root))
        return locations

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        if any(path.is_relative_to(root) for root in self._cache_roots(ctx)):
            artifact = self._directory_artifact(path, path.name, "Disk cache", ctx)
            return [artifact] if artifact else []

        artifacts: List[Artifact] = []
        for spec in CHROMIUM_STORES:
            if ctx.is_cancelled():
                return artifacts
            artifact = store_artifact(path, spec, ctx, self.source, self.metadata.display_name)
            if artifact is not None:
                LOGGER.debug("%s: %s", self.name, artifact.label)
                artifacts.append(artifact)

        for rel, title in CHROMIUM_SITE_DATA_DIRS:
            if ctx.is_cancelled():
                break
            artifact = self._directory_artifact(path / rel, path.name, title, ctx)
            if artifact is not None:
                artifacts.append(artifact)
        return artifacts

    def _directory_artifact(self, path: Path, scope: str, title: str, ctx: ProbeContext) -> Optional[Artifact]:
        size = directory_size(path, ctx.is_cancelled)
        if not size:
            return None
        return Artifact(
            source=self.source,
            category=Category.SITE_DATA,
            location=path,
            size_bytes=size,
            label=scoped_label(self.metadata.display_name, scope, title),
        )
