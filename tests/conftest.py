"""Pytest hooks and fixtures."""

import os

import pytest

from kbaserpc.config.access import clear_config_cache


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "requires_network: talks to live KBase services (skipped unless KBASERPC_LIVE=1)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip requires_network tests unless live runs are switched on."""
    if os.environ.get("KBASERPC_LIVE") == "1":
        return
    skip = pytest.mark.skip(reason="Live KBase services (set KBASERPC_LIVE=1)")
    for item in items:
        if "requires_network" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _isolated_config(request, monkeypatch):
    """Keep the developer's KBASERPC_* settings out of offline tests."""
    if request.node.get_closest_marker("requires_network") is None:
        for key in list(os.environ):
            if key.startswith("KBASERPC_") and key != "KBASERPC_LIVE":
                monkeypatch.delenv(key)
    clear_config_cache()
    yield
    clear_config_cache()
