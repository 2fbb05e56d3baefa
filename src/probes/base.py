"""
Base probe interface for the privacy scan.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from core.app_registry import ApplicationRegistry
from core.artifacts import Artifact
from core.config import ScanConfig
from core.enums import Category, Source
from core.exceptions import SchemaMissingError, StoreError, StoreNotFoundError
from core.logging import get_logger

from .callbacks import NullCallbacks, ProbeCallbacks
from ._shared import open_store

LOGGER = get_logger("probes.base")


@dataclass
class ProbeMetadata:
    """
    Metadata about a probe.

    Attributes:
        name: Internal identifier (e.g., "chromium_chrome")
        display_name: UI display name (e.g., "Google Chrome")
        source: Application family the probe's artifacts belong to
        categories: Artifact categories this probe can emit
        description: Short description for UI
    """
    name: str
    display_name: str
    source: Source
    categories: Tuple[Category, ...]
    description: str = ""


@dataclass
class ProbeContext:
    """Everything a probe needs to resolve locations and read stores."""
    config: ScanConfig = field(default_factory=ScanConfig)
    callbacks: ProbeCallbacks = field(default_factory=NullCallbacks)
    app_registry: Optional[ApplicationRegistry] = None

    @property
    def home(self) -> Path:
        return self.config.home_dir

    @property
    def system_root(self) -> Path:
        return self.config.system_root

    def is_cancelled(self) -> bool:
        return self.callbacks.is_cancelled()

    def open_store(self, path: Path):
        """Read-only store handle using the scan's timeout and lock policy."""
        return open_store(
            path,
            timeout=self.config.store_timeout,
            copy_on_lock=self.config.copy_locked_stores,
        )


class BaseProbe(ABC):
    """
    Base class for all probes.

    Each probe is responsible for:
    1. Declaring its family and categories (metadata)
    2. Knowing where its family stores data (candidate_locations)
    3. Turning one location into typed artifacts (probe)

    Probes are pure discovery: they never mutate or lock what they inspect.

    Example:
        class NotesProbe(BaseProbe):
            @property
            def metadata(self):
                return ProbeMetadata(
                    name="notes",
                    display_name="Notes",
                    source=Source.SYSTEM,
                    categories=(Category.CHAT,),
                )

            def candidate_locations(self, ctx):
                return [ctx.home / "Library/Group Containers/group.com.apple.notes"]

            def probe(self, path, ctx):
                return [Artifact(...)]
    """

    @property
    @abstractmethod
    def metadata(self) -> ProbeMetadata:
        """Return probe metadata."""
        pass

    @abstractmethod
    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        """
        Locations where this family may store data.

        Lists every historical layout, since the owning application may have
        moved its storage between versions. Paths need not exist.
        """
        pass

    @abstractmethod
    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        """Discover artifacts at one existing candidate location."""
        pass

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def source(self) -> Source:
        return self.metadata.source

    def run(self, ctx: ProbeContext) -> List[Artifact]:
        """
        Probe every candidate location, checking cancellation between them.

        Store and filesystem failures degrade to "nothing found here"; they
        never propagate to the orchestrator.
        """
        artifacts: List[Artifact] = []
        for path in self.candidate_locations(ctx):
            if ctx.is_cancelled():
                LOGGER.debug("%s: cancelled, keeping %d artifacts", self.name, len(artifacts))
                break
            if not path.exists():
                LOGGER.debug("%s: candidate %s not present", self.name, path)
                continue
            ctx.callbacks.on_path(str(path))
            try:
                artifacts.extend(self.probe(path, ctx))
            except (SchemaMissingError, StoreNotFoundError) as exc:
                LOGGER.debug("%s: nothing at %s (%s)", self.name, path, exc)
            except StoreError as exc:
                LOGGER.warning("%s: cannot read %s: %s", self.name, path, exc)
                ctx.callbacks.on_log(f"{self.metadata.display_name}: {exc}", "warning")
            except OSError as exc:
                LOGGER.warning("%s: filesystem error at %s: %s", self.name, path, exc)
        return artifacts
