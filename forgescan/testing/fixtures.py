"""
Pytest fixtures for forgescan testing.

Provides helper constructors and fixtures for testing code that drives
discovery against mock forges.
"""

from collections.abc import Generator
from datetime import datetime, timezone

import pytest

from forgescan.config import AuthConfig, AuthType, FilteringConfig, ForgeConfig, ForgeType
from forgescan.registry import ForgeManager
from forgescan.testing.mock import MockForgeClient
from forgescan.types import Organization, Repository


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_repository(
    full_name: str = "mock-org/mock-repo",
    has_docs: bool = False,
    has_doc_ignore: bool = False,
    archived: bool = False,
    private: bool = False,
    default_branch: str = "main",
    **kwargs,
) -> Repository:
    """
    Create a Repository for testing.

    ``has_docs``/``has_doc_ignore`` describe what the repository contains;
    a MockForgeClient reports them from check_documentation().

    Example:
        ```python
        from forgescan.testing import create_mock_repository

        repo = create_mock_repository("acme/handbook", has_docs=True)
        ```
    """
    _, _, name = full_name.rpartition("/")
    defaults = {
        "id": f"id-{full_name}",
        "name": name,
        "full_name": full_name,
        "clone_url": f"https://forge.example.com/{full_name}.git",
        "ssh_url": f"git@forge.example.com:{full_name}.git",
        "default_branch": default_branch,
        "has_docs": has_docs,
        "has_doc_ignore": has_doc_ignore,
        "archived": archived,
        "private": private,
        "last_updated": datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
    }
    defaults.update(kwargs)
    return Repository(**defaults)


def create_mock_organization(name: str = "mock-org", **kwargs) -> Organization:
    """Create an Organization for testing."""
    defaults = {
        "id": f"id-{name}",
        "name": name,
        "display_name": name.title(),
        "type": "organization",
    }
    defaults.update(kwargs)
    return Organization(**defaults)


def create_forge_config(
    name: str = "mock-forge",
    forge_type: ForgeType = ForgeType.GITHUB,
    organizations: list[str] | None = None,
    **kwargs,
) -> ForgeConfig:
    """Create a token-authenticated ForgeConfig for testing."""
    defaults = {
        "name": name,
        "type": forge_type,
        "organizations": list(organizations or []),
        "auth": AuthConfig(type=AuthType.TOKEN, token="test-token-0123456789"),
    }
    defaults.update(kwargs)
    return ForgeConfig(**defaults)


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_forge() -> Generator[MockForgeClient, None, None]:
    """
    Provide a MockForgeClient for testing.

    Example:
        ```python
        def test_my_feature(mock_forge):
            mock_forge.add_repository(create_mock_repository("acme/docs", has_docs=True))
            result = my_function(mock_forge)
            assert mock_forge.was_called("check_documentation")
        ```
    """
    client = MockForgeClient(name="mock-forge")
    yield client
    client.reset()


@pytest.fixture
def forge_manager() -> ForgeManager:
    """Provide an empty ForgeManager."""
    return ForgeManager()


@pytest.fixture
def forge_manager_with_mock(mock_forge: MockForgeClient) -> ForgeManager:
    """Provide a ForgeManager with ``mock_forge`` registered for organization "acme"."""
    manager = ForgeManager()
    manager.add_forge(create_forge_config(name=mock_forge.get_name(), organizations=["acme"]), mock_forge)
    return manager


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_repository() -> Repository:
    """Provide a sample Repository with documentation."""
    return create_mock_repository(
        "acme/handbook",
        has_docs=True,
        description="Company handbook",
        language="Markdown",
        topics=["docs"],
    )


@pytest.fixture
def sample_organization() -> Organization:
    """Provide a sample Organization."""
    return create_mock_organization("acme", description="ACME Corp")


@pytest.fixture
def sample_forge_config() -> ForgeConfig:
    """Provide a sample GitHub ForgeConfig scanning "acme"."""
    return create_forge_config(name="github-main", organizations=["acme"])


@pytest.fixture
def default_filtering() -> FilteringConfig:
    """Provide the default filtering policy (docs required, no patterns)."""
    return FilteringConfig()
