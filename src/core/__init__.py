"""Core data model and orchestration layer for the privacy scanner."""

from .config import AppConfig, load_app_config  # noqa: F401
from .artifacts import Artifact, Outcome, PermissionGrant, PurgePlan, PurgeTarget  # noqa: F401
from .catalog import ArtifactCatalog  # noqa: F401
from .session import ScanSession  # noqa: F401
# NOTE: scan_orchestrator and privacy_service are not exported from the package
# to avoid a circular import with probes/ and remediation/.
# Import directly: from core.privacy_service import PrivacyService
