"""forgescan testing utilities.

Provides a mock forge client and fixtures for testing code built on forgescan.
"""

from forgescan.testing.fixtures import (
    create_forge_config,
    create_mock_organization,
    create_mock_repository,
)
from forgescan.testing.mock import MockCall, MockForgeClient, MockResponse

__all__ = [
    # Mock client
    "MockForgeClient",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_repository",
    "create_mock_organization",
    "create_forge_config",
]
