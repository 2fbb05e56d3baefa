"""
Fixtures for the Qt worker tests.

Rendering is forced offscreen so the suite runs without a display.
"""
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from core.privacy_service import PrivacyService
from probes.browser.chromium import ChromiumProbe


@pytest.fixture()
def service(scan_config, remediation_config, process_registry, shell_refresher):
    """PrivacyService over a temporary home with fake collaborators."""
    return PrivacyService(
        probes=[ChromiumProbe("chrome")],
        scan_config=scan_config,
        remediation_config=remediation_config,
        process_registry=process_registry,
        shell_refresher=shell_refresher,
    )
