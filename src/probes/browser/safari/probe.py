"""
Safari probe.

Safari keeps one store per kind of data, so every artifact here is removed
as a whole file; nothing in these files needs to survive remediation.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import List, Optional

from core.artifacts import Artifact
from core.enums import Category, Source
from core.logging import get_logger

from ..._shared import count_label, count_or_zero, directory_size, file_size, scoped_label
from ...base import BaseProbe, ProbeContext, ProbeMetadata
from ._patterns import (
    COOKIES_FILE,
    DOWNLOADS_KEY,
    DOWNLOADS_PLIST,
    HISTORY_COUNT_TABLE,
    HISTORY_DB,
    SAFARI_CATEGORIES,
    SAFARI_ROOTS,
    SAFARI_SITE_DATA_DIRS,
)
from ._parsers import CookieJarError, domain_counts, parse_cookie_domains

LOGGER = get_logger("probes.browser.safari")

DISPLAY_NAME = "Safari"


class SafariProbe(BaseProbe):

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name="safari",
            display_name=DISPLAY_NAME,
            source=Source.SAFARI,
            categories=SAFARI_CATEGORIES,
            description="History, downloads list, cookies and website data",
        )

    def _roots(self, ctx: ProbeContext, kind: str) -> List[Path]:
        return [ctx.home / rel for rel in SAFARI_ROOTS[kind]]

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        return (
            self._roots(ctx, "profile")
            + self._roots(ctx, "cookies")
            + self._roots(ctx, "cache")
        )

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        scope = "Container" if "Containers" in path.parts else ""
        if path in self._roots(ctx, "cookies"):
            artifact = self._cookies(path / COOKIES_FILE, scope)
            return [artifact] if artifact else []
        if path in self._roots(ctx, "cache"):
            artifact = self._directory(path, scope, "Cache", ctx)
            return [artifact] if artifact else []

        artifacts = []
        for artifact in (
            self._history(path / HISTORY_DB, scope, ctx),
            self._downloads(path / DOWNLOADS_PLIST, scope),
        ):
            if artifact is not None:
                artifacts.append(artifact)
        for rel, title in SAFARI_SITE_DATA_DIRS:
            if ctx.is_cancelled():
                break
            artifact = self._directory(path / rel, scope, title, ctx)
            if artifact is not None:
                artifacts.append(artifact)
        return artifacts

    def _history(self, db_path: Path, scope: str, ctx: ProbeContext) -> Optional[Artifact]:
        if not db_path.is_file():
            return None
        ctx.callbacks.on_path(str(db_path))
        with ctx.open_store(db_path) as store:
            count = count_or_zero(store, HISTORY_COUNT_TABLE)
        if count == 0:
            return None
        return Artifact(
            source=Source.SAFARI,
            category=Category.HISTORY,
            location=db_path,
            size_bytes=file_size(db_path) or 0,
            label=scoped_label(DISPLAY_NAME, scope, count_label(count, ("history entry", "history entries"))),
            row_count=count,
        )

    def _downloads(self, plist_path: Path, scope: str) -> Optional[Artifact]:
        if not plist_path.is_file():
            return None
        try:
            with plist_path.open("rb") as handle:
                data = plistlib.load(handle)
        except (plistlib.InvalidFileException, ValueError) as exc:
            LOGGER.debug("Unreadable %s: %s", plist_path, exc)
            return None
        entries = data.get(DOWNLOADS_KEY, []) if isinstance(data, dict) else []
        if not entries:
            return None
        return Artifact(
            source=Source.SAFARI,
            category=Category.DOWNLOADS,
            location=plist_path,
            size_bytes=file_size(plist_path) or 0,
            label=scoped_label(DISPLAY_NAME, scope, count_label(len(entries), ("download record", "download records"))),
            row_count=len(entries),
        )

    def _cookies(self, cookie_path: Path, scope: str) -> Optional[Artifact]:
        if not cookie_path.is_file():
            return None
        try:
            domains = parse_cookie_domains(cookie_path)
        except CookieJarError as exc:
            LOGGER.debug("%s", exc)
            count = None
        else:
            count = len(domains)
            LOGGER.debug("%s: %d cookies across %d sites", cookie_path, count, len(domain_counts(domains)))
        size = file_size(cookie_path) or 0
        if count == 0:
            return None
        text = count_label(count, ("cookie", "cookies")) if count is not None else "Cookie file"
        return Artifact(
            source=Source.SAFARI,
            category=Category.COOKIES,
            location=cookie_path,
            size_bytes=size,
            label=scoped_label(DISPLAY_NAME, scope, text),
            row_count=count,
        )

    def _directory(self, path: Path, scope: str, title: str, ctx: ProbeContext) -> Optional[Artifact]:
        size = directory_size(path, ctx.is_cancelled)
        if not size:
            return None
        return Artifact(
            source=Source.SAFARI,
            category=Category.SITE_DATA,
            location=path,
            size_bytes=size,
            label=scoped_label(DISPLAY_NAME, scope, title),
        )
