"""Pytest hooks and fixtures."""

import os

import pytest

from fakes import FakeTransport


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "requires_server: needs a live database at SURREAL_RPC_TEST_URL (skipped otherwise)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip requires_server tests unless a test database URL is configured."""
    if os.environ.get("SURREAL_RPC_TEST_URL"):
        return
    skip = pytest.mark.skip(reason="SURREAL_RPC_TEST_URL is not set")
    for item in items:
        if "requires_server" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
