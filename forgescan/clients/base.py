"""
Forge client contract.

Every forge type implements ``ForgeClient``. The discovery engine only calls
``get_type``, ``get_name``, ``list_organizations``, ``list_repositories``,
``get_repository`` and ``check_documentation``; the webhook and edit-URL
operations serve the surrounding tooling.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from urllib.parse import quote

import httpx

from forgescan.config import AuthType, FilteringConfig, ForgeConfig, ForgeType
from forgescan.exceptions import ConfigurationError
from forgescan.transport import HTTPTransport
from forgescan.types import Organization, Repository, WebhookEvent

logger = logging.getLogger(__name__)

DEFAULT_DOC_PATHS = ("docs",)
DEFAULT_IGNORE_FILES = (".docignore",)


class ForgeClient(ABC):
    """Contract implemented once per forge type."""

    @abstractmethod
    def get_type(self) -> ForgeType:
        """Return the forge type."""

    @abstractmethod
    def get_name(self) -> str:
        """Return the configured name of this forge instance."""

    @abstractmethod
    def list_organizations(self) -> list[Organization]:
        """Return all accessible organizations/groups."""

    @abstractmethod
    def list_repositories(self, organizations: list[str]) -> list[Repository]:
        """Return all repositories of the given organizations/groups."""

    @abstractmethod
    def get_repository(self, owner: str, name: str) -> Repository:
        """Return one repository."""

    @abstractmethod
    def check_documentation(self, repo: Repository) -> None:
        """Set ``repo.has_docs`` and ``repo.has_doc_ignore`` in place."""

    @abstractmethod
    def validate_webhook(self, payload: bytes, signature: str, secret: str) -> bool:
        """Check a webhook request signature."""

    @abstractmethod
    def parse_webhook_event(self, payload: bytes, event_type: str) -> WebhookEvent:
        """Parse a webhook payload into a normalized event."""

    @abstractmethod
    def register_webhook(self, repo: Repository, webhook_url: str) -> None:
        """Register a webhook for a repository."""

    @abstractmethod
    def get_edit_url(self, repo: Repository, file_path: str, branch: str) -> str:
        """Return the web URL for editing a file."""


class HTTPForgeClient(ForgeClient):
    """
    Shared plumbing for forges reached over an HTTP API.

    Subclasses set ``forge_type``, the default URLs and the auth header
    prefix, and implement the wire mapping.
    """

    forge_type: ForgeType
    default_api_url: str = ""
    default_base_url: str = ""
    auth_header_prefix: str = "Bearer "
    extra_headers: dict[str, str] = {}

    def __init__(
        self,
        config: ForgeConfig,
        filtering: FilteringConfig | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Forge configuration; its type must match the client
            filtering: Policy whose required_paths/ignore_files drive the documentation probe
            timeout: Request timeout in seconds
            http_client: Pre-built httpx client (for tests)

        Raises:
            ConfigurationError: On a type mismatch or missing token
        """
        if config.type != self.forge_type:
            raise ConfigurationError(
                f"Invalid forge type for {type(self).__name__}: {config.type.value}"
            )
        if config.auth is None or config.auth.type != AuthType.TOKEN or not config.auth.token:
            raise ConfigurationError(f"Forge {config.name} requires token authentication")

        self.config = config
        self.api_url = (config.api_url or self.default_api_url).rstrip("/")
        self.base_url = (config.base_url or self.default_base_url).rstrip("/")

        doc_paths = filtering.required_paths if filtering and filtering.required_paths else DEFAULT_DOC_PATHS
        ignore_files = filtering.ignore_files if filtering and filtering.ignore_files else DEFAULT_IGNORE_FILES
        self.doc_paths = list(doc_paths)
        self.ignore_files = list(ignore_files)

        self.transport = HTTPTransport(
            api_url=self.api_url,
            token=config.auth.token,
            auth_header_prefix=self.auth_header_prefix,
            headers=self.extra_headers,
            timeout=timeout,
            client=http_client,
        )

    def get_type(self) -> ForgeType:
        return self.forge_type

    def get_name(self) -> str:
        return self.config.name

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "HTTPForgeClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def split_full_name(full_name: str) -> tuple[str, str]:
        """Split "owner/repo" (owner may contain slashes on GitLab)."""
        owner, sep, name = full_name.rpartition("/")
        if not sep:
            return "", full_name
        return owner, name

    def _repo_path(self, repo: Repository) -> str:
        """``/repos/{owner}/{name}`` with both segments escaped."""
        owner, name = self.split_full_name(repo.full_name)
        return f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}"

    @staticmethod
    def parse_timestamp(value: str | None) -> datetime | None:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None

    def _any_path_exists(self, repo: Repository, paths: list[str], branch: str) -> bool:
        return any(self._path_exists(repo, path, branch) for path in paths)

    def check_documentation(self, repo: Repository) -> None:
        branch = repo.default_branch or "main"
        repo.has_docs = self._any_path_exists(repo, self.doc_paths, branch)
        repo.has_doc_ignore = self._any_path_exists(repo, self.ignore_files, branch)

    @abstractmethod
    def _path_exists(self, repo: Repository, path: str, branch: str) -> bool:
        """Probe a single path on a branch."""
