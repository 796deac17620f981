"""forgescan - Multi-forge repository discovery for documentation sites."""

from forgescan.clients import (
    ForgeClient,
    ForgejoClient,
    GitHubClient,
    GitLabClient,
    HTTPForgeClient,
    create_client,
)
from forgescan.concurrency import Outcome, run_bounded
from forgescan.config import (
    AuthConfig,
    AuthType,
    Config,
    DiscoveryConfig,
    FilteringConfig,
    ForgeConfig,
    ForgeType,
    WebhookConfig,
    load_config,
)
from forgescan.discovery import DiscoveryService
from forgescan.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DiscoveryCancelledError,
    ForgeOperationError,
    ForgeScanError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from forgescan.filtering import decide, matches_pattern
from forgescan.logging import configure_logging, get_logger
from forgescan.registry import ForgeManager
from forgescan.transport import HTTPTransport
from forgescan.types import (
    BuildRepository,
    DiscoveryResult,
    FilterDecision,
    FilterReason,
    Organization,
    Repository,
    WebhookCommit,
    WebhookEvent,
    WebhookEventType,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Discovery
    "DiscoveryService",
    "ForgeManager",
    "DiscoveryResult",
    # Clients
    "ForgeClient",
    "HTTPForgeClient",
    "GitHubClient",
    "GitLabClient",
    "ForgejoClient",
    "create_client",
    # Types
    "Repository",
    "Organization",
    "BuildRepository",
    "FilterReason",
    "FilterDecision",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookCommit",
    # Filtering
    "decide",
    "matches_pattern",
    # Concurrency
    "run_bounded",
    "Outcome",
    # Configuration
    "Config",
    "ForgeConfig",
    "ForgeType",
    "AuthConfig",
    "AuthType",
    "WebhookConfig",
    "FilteringConfig",
    "DiscoveryConfig",
    "load_config",
    # Exceptions
    "ForgeScanError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "DiscoveryCancelledError",
    "ForgeOperationError",
    # Transport
    "HTTPTransport",
    # Logging
    "configure_logging",
    "get_logger",
]
