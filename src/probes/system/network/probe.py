"""
Network identity probe.

Counts remembered Wi-Fi networks. Current macOS keeps them in
``com.apple.wifi.known-networks.plist`` (one top-level key per network);
older releases used the ``KnownNetworks`` dictionary inside the airport
preferences. Removing them requires the network configuration tool, so
these artifacts are reported but skipped at remediation time.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Any, List, Optional

from core.artifacts import Artifact
from core.enums import Category, Source
from core.logging import get_logger

from ..._shared import count_label, file_size, under_root
from ...base import BaseProbe, ProbeContext, ProbeMetadata

LOGGER = get_logger("probes.system.network")

KNOWN_NETWORKS_PLIST = "/Library/Preferences/com.apple.wifi.known-networks.plist"
LEGACY_AIRPORT_PLIST = "/Library/Preferences/SystemConfiguration/com.apple.airport.preferences.plist"
LEGACY_KEY = "KnownNetworks"


def count_known_networks(data: Any, legacy: bool) -> int:
    if not isinstance(data, dict):
        return 0
    if legacy:
        networks = data.get(LEGACY_KEY)
        return len(networks) if isinstance(networks, (dict, list)) else 0
    return sum(1 for value in data.values() if isinstance(value, dict))


class NetworkIdentityProbe(BaseProbe):

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name="network",
            display_name="Wi-Fi Networks",
            source=Source.SYSTEM,
            categories=(Category.NETWORK_IDENTITY,),
            description="Remembered wireless networks",
        )

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        return [
            under_root(ctx.system_root, KNOWN_NETWORKS_PLIST),
            under_root(ctx.system_root, LEGACY_AIRPORT_PLIST),
        ]

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        legacy = path.name == Path(LEGACY_AIRPORT_PLIST).name
        count = self._count(path, legacy)
        if not count:
            return []
        return [Artifact(
            source=Source.SYSTEM,
            category=Category.NETWORK_IDENTITY,
            location=path,
            size_bytes=file_size(path) or 0,
            label=count_label(count, ("known Wi-Fi network", "known Wi-Fi networks")),
            row_count=count,
        )]

    @staticmethod
    def _count(path: Path, legacy: bool) -> Optional[int]:
        try:
            with path.open("rb") as handle:
                data = plistlib.load(handle)
        except (plistlib.InvalidFileException, ValueError) as exc:
            LOGGER.debug("Unreadable %s: %s", path, exc)
            return None
        return count_known_networks(data, legacy)
