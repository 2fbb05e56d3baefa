"""
Recent items probe.

Fixed candidate paths; existence and size only. The legacy recent-items
preference and the modern shared file lists are both emitted because
macOS still writes to whichever one the calling API targets.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from core.artifacts import Artifact
from core.enums import Category, Source

from ..._shared import path_size
from ...base import BaseProbe, ProbeContext, ProbeMetadata

RECENT_ITEMS_LOCATIONS = (
    ("Library/Preferences/com.apple.recentitems.plist", "Recent items list"),
    ("Library/Application Support/com.apple.sharedfilelist", "Shared file lists (recents and favorites)"),
)


class RecentItemsProbe(BaseProbe):

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name="recent_items",
            display_name="Recent Items",
            source=Source.SYSTEM,
            categories=(Category.RECENT_ITEM,),
            description="Recently opened documents, applications and servers",
        )

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        return [ctx.home / rel for rel, _ in RECENT_ITEMS_LOCATIONS]

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        titles = {ctx.home / rel: title for rel, title in RECENT_ITEMS_LOCATIONS}
        size = path_size(path, ctx.is_cancelled)
        if size is None:
            return []
        return [Artifact(
            source=Source.SYSTEM,
            category=Category.RECENT_ITEM,
            location=path,
            size_bytes=size,
            label=titles.get(path, path.name),
        )]
