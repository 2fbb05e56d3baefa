"""
Permission registry auditor.

Reads the system-scope and user-scope permission registries (``TCC.db``)
and surfaces every active grant held by an application bundle. The auditor
is read-only: grants are displayed, never reset.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from core.artifacts import Artifact, PermissionGrant
from core.enums import Category, Source
from core.exceptions import SchemaMissingError
from core.logging import get_logger

from ..._shared import StoreHandle, count_label, under_root
from ...base import BaseProbe, ProbeContext, ProbeMetadata
from ._services import describe_service

LOGGER = get_logger("probes.system.permissions")

REGISTRY_RELATIVE = "Library/Application Support/com.apple.TCC/TCC.db"

# client_type 0 is a bundle identifier; 1 is an absolute executable path
BUNDLE_CLIENT_TYPE = 0
AUTH_ALLOWED = 2

GRANTS_QUERY = (
    "SELECT client, service, last_modified FROM access "
    "WHERE client_type = ? AND auth_value = ? ORDER BY client, service"
)
# Registries written before macOS 11 have an ``allowed`` flag instead of auth_value
LEGACY_GRANTS_QUERY = (
    "SELECT client, service, NULL AS last_modified FROM access "
    "WHERE client_type = ? AND allowed = 1 ORDER BY client, service"
)

FIRST_PARTY_MARKER = "apple"
VISIBLE_FIRST_PARTY = ("com.apple.Safari",)


def is_hidden_first_party(bundle_id: str) -> bool:
    """True for first-party system components that are not user-facing apps."""
    return FIRST_PARTY_MARKER in bundle_id.lower() and bundle_id not in VISIBLE_FIRST_PARTY


def _granted_at(value) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def read_grants(store: StoreHandle) -> List[Tuple[str, str, Optional[datetime]]]:
    """Active bundle grants as (client, service, granted_at) rows."""
    try:
        rows = list(store.query(GRANTS_QUERY, (BUNDLE_CLIENT_TYPE, AUTH_ALLOWED)))
    except SchemaMissingError:
        LOGGER.debug("No auth_value column in %s, using legacy schema", store.path)
        rows = list(store.query(LEGACY_GRANTS_QUERY, (BUNDLE_CLIENT_TYPE,)))
    return [(row["client"], row["service"], _granted_at(row["last_modified"])) for row in rows]


class PermissionRegistryAuditor(BaseProbe):
    """One parent artifact per application, one child per granted service."""

    @property
    def metadata(self) -> ProbeMetadata:
        return ProbeMetadata(
            name="permissions",
            display_name="App Permissions",
            source=Source.SYSTEM,
            categories=(Category.PERMISSION_GRANT,),
            description="Active camera, microphone, disk and other privacy grants",
        )

    def candidate_locations(self, ctx: ProbeContext) -> List[Path]:
        return [
            under_root(ctx.system_root, "/" + REGISTRY_RELATIVE),
            ctx.home / REGISTRY_RELATIVE,
        ]

    def probe(self, path: Path, ctx: ProbeContext) -> List[Artifact]:
        scope = "system" if not path.is_relative_to(ctx.home) else "user"
        with ctx.open_store(path) as store:
            rows = read_grants(store)

        by_owner: Dict[str, List[Tuple[str, Optional[datetime]]]] = OrderedDict()
        for client, service, granted_at in rows:
            if not client or not service:
                continue
            by_owner.setdefault(client, []).append((service, granted_at))

        artifacts = []
        for bundle_id, services in by_owner.items():
            owner = self._owner(bundle_id, ctx)
            if owner is None:
                LOGGER.debug("Dropping unresolved first-party client %s", bundle_id)
                continue
            display_name, icon_path = owner
            parent = Artifact(
                source=Source.SYSTEM,
                category=Category.PERMISSION_GRANT,
                location=path,
                label=f"{display_name} ({scope}): {count_label(len(services), ('permission', 'permissions'))}",
            )
            for service, granted_at in services:
                service_label, service_category = describe_service(service)
                parent.add_child(Artifact(
                    source=Source.SYSTEM,
                    category=Category.PERMISSION_GRANT,
                    location=path,
                    label=f"{display_name}: {service_label}",
                    grant=PermissionGrant(
                        owner_bundle_id=bundle_id,
                        owner_display_name=display_name,
                        service_kind=service,
                        service_label=service_label,
                        service_category=service_category,
                        granted_at=granted_at,
                        registry_path=path,
                        icon_path=icon_path,
                    ),
                ))
            artifacts.append(parent)
        LOGGER.debug("%s: %d applications with active grants in %s", self.name, len(artifacts), path)
        return artifacts

    @staticmethod
    def _owner(bundle_id: str, ctx: ProbeContext) -> Optional[Tuple[str, Optional[Path]]]:
        """(display name, icon) for a client, or None when it should be hidden."""
        info = ctx.app_registry.resolve(bundle_id) if ctx.app_registry is not None else None
        if info is not None:
            return info.display_name, info.icon_path
        if is_hidden_first_party(bundle_id):
            return None
        return bundle_id, None
