"""System-scope probes: permission grants, recent items, known networks."""

from .network import NetworkIdentityProbe
from .permissions import PermissionRegistryAuditor
from .recent_items import RecentItemsProbe

__all__ = ["NetworkIdentityProbe", "PermissionRegistryAuditor", "RecentItemsProbe"]
