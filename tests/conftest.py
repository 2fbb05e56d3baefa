"""Global pytest configuration (non-GUI fixtures only)."""

import pytest


def _build_probe_registry():
    from probes.probe_registry import ProbeRegistry
    return ProbeRegistry()


@pytest.fixture(scope="session")
def probe_registry():
    """Session-wide registry of the built-in probes."""
    return _build_probe_registry()


@pytest.fixture(scope="session")
def probe_registry_names(probe_registry):
    """Cached probe names for quick membership checks."""
    return probe_registry.list_names()
