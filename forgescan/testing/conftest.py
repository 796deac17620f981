"""
Pytest plugin for forgescan testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["forgescan.testing.conftest"]

Or import the fixtures directly:

    from forgescan.testing.fixtures import mock_forge, sample_repository
"""

# Re-export all fixtures for pytest auto-discovery
from forgescan.testing.fixtures import (
    default_filtering,
    forge_manager,
    forge_manager_with_mock,
    mock_forge,
    sample_forge_config,
    sample_organization,
    sample_repository,
)

__all__ = [
    "mock_forge",
    "forge_manager",
    "forge_manager_with_mock",
    "sample_repository",
    "sample_organization",
    "sample_forge_config",
    "default_filtering",
]
