"""Shared fixtures for the forgescan test suite."""

from forgescan.testing.fixtures import (  # noqa: F401
    default_filtering,
    forge_manager,
    forge_manager_with_mock,
    mock_forge,
    sample_forge_config,
    sample_organization,
    sample_repository,
)
