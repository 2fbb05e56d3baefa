"""Chat probe: fixed candidate paths, existence and size only."""

from __future__ import annotations

from pathlib import Path
from typing import List

from core.artifacts import Artifact
from core.enums import Category

from .._shared import path_size, scoped_label
from ..base import BaseProbe, ProbeContext, ProbeMetadata
from ._patterns import CHAT_APPS


class ChatProbe(BaseProbe):

    def __init__(self, app: str = "messages"):
        if app not in CHAT_APPS:
            raise ValueError(f"Unknown chat application: {app}")
        self.app = app
        self._info = CHAT_APPS[app]

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name=f"chat_{self.app}",
            display_name=self._info["display_name"],
            source=self._info["source"],
            categories=(Category.CHAT,),
            description="Conversation history and attachments",
        )

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        return [ctx.home / rel for rel, _ in self._info["locations"]]

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        titles = {ctx.home / rel: title for rel, title in self._info["locations"]}
        size = path_size(path, ctx.is_cancelled)
        if not size:
            return []
        return [Artifact(
            source=self.source,
            category=Category.CHAT,
            location=path,
            size_bytes=size,
            label=scoped_label(self.metadata.display_name, "", titles.get(path, path.name)),
        )]
