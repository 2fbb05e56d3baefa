"""
Probe registry.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from core.enums import Category, Source
from core.logging import get_logger

from .base import BaseProbe
from .browser import ChromiumProbe, FirefoxProbe, SafariProbe
from .browser.chromium import CHROMIUM_BROWSERS
from .chat import CHAT_APPS, ChatProbe
from .system import NetworkIdentityProbe, PermissionRegistryAuditor, RecentItemsProbe

LOGGER = get_logger("probes.registry")


def default_probes() -> List[BaseProbe]:
    """One instance of every built-in probe, in display order."""
    probes: List[BaseProbe] = [SafariProbe()]
    probes.extend(ChromiumProbe(browser) for browser in CHROMIUM_BROWSERS)
    probes.append(FirefoxProbe())
    probes.extend([PermissionRegistryAuditor(), RecentItemsProbe(), NetworkIdentityProbe()])
    probes.extend(ChatProbe(app) for app in CHAT_APPS)
    return probes


class ProbeRegistry:
    """
    Central registry of source probes.

    Usage:
        registry = ProbeRegistry()

        # Get specific probe
        chrome = registry.get("chromium_chrome")

        # All probes that can emit cookies
        cookie_probes = registry.get_by_category(Category.COOKIES)
    """

    def __init__(self, probes: Optional[Iterable[BaseProbe]] = None):
        self._probes: Dict[str, BaseProbe] = {}
        for probe in default_probes() if probes is None else probes:
            self.register(probe)

    def register(self, probe: BaseProbe) -> None:
        if probe.name in self._probes:
            raise ValueError(f"Duplicate probe name: {probe.name}")
        self._probes[probe.name] = probe
        LOGGER.debug("Registered probe %s", probe.name)

    def get(self, name: str) -> Optional[BaseProbe]:
        return self._probes.get(name)

    def get_all(self) -> List[BaseProbe]:
        return list(self._probes.values())

    def get_by_source(self, source: Source) -> List[BaseProbe]:
        return [p for p in self._probes.values() if p.source is source]

    def get_by_category(self, category: Category) -> List[BaseProbe]:
        return [p for p in self._probes.values() if category in p.metadata.categories]

    def list_names(self) -> List[str]:
        return list(self._probes)

    def __len__(self) -> int:
        return len(self._probes)
