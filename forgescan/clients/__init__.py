"""forgescan forge clients."""

import httpx

from forgescan.clients.base import ForgeClient, HTTPForgeClient
from forgescan.clients.forgejo import ForgejoClient
from forgescan.clients.github import GitHubClient
from forgescan.clients.gitlab import GitLabClient
from forgescan.config import FilteringConfig, ForgeConfig, ForgeType
from forgescan.exceptions import ConfigurationError

_CLIENT_TYPES: dict[ForgeType, type[HTTPForgeClient]] = {
    ForgeType.GITHUB: GitHubClient,
    ForgeType.GITLAB: GitLabClient,
    ForgeType.FORGEJO: ForgejoClient,
}


def create_client(
    config: ForgeConfig,
    filtering: FilteringConfig | None = None,
    http_client: httpx.Client | None = None,
) -> ForgeClient:
    """
    Create the client matching ``config.type``.

    Raises:
        ConfigurationError: If the type is unsupported or the config is incomplete
    """
    client_type = _CLIENT_TYPES.get(config.type)
    if client_type is None:
        raise ConfigurationError(f"Unsupported forge type: {config.type}")
    return client_type(config, filtering=filtering, http_client=http_client)


__all__ = [
    "ForgeClient",
    "HTTPForgeClient",
    "GitHubClient",
    "GitLabClient",
    "ForgejoClient",
    "create_client",
]
