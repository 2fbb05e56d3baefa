"""Permission registry auditor."""

from ._services import describe_service
from .auditor import PermissionRegistryAuditor, is_hidden_first_party, read_grants

__all__ = ["PermissionRegistryAuditor", "describe_service", "is_hidden_first_party", "read_grants"]
