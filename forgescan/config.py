"""
forgescan configuration.

Configuration loading with environment variable support and sensible defaults.

Environment Variables:
    FORGESCAN_CONFIG_PATH: Path to the YAML config file (used when no path is passed)
    FORGESCAN_FORGE_CONCURRENCY: Override discovery.forge_concurrency
    FORGESCAN_PROBE_CONCURRENCY: Override discovery.probe_concurrency
    FORGESCAN_<FORGE_NAME>_TOKEN: Token for the named forge (name upper-cased,
        non-alphanumerics replaced by "_"); overrides auth.token

Configuration Schema:
    forges:
      - name: str - Unique forge name
        type: github | gitlab | forgejo
        api_url: str - API base URL (default depends on type)
        base_url: str - Web base URL used for edit links
        organizations: [str] - Organizations to scan
        groups: [str] - Groups to scan
        auth: {type: token | ssh | basic, token, username, password, key_path}
        webhook: {secret, path, events, register_auto}
        options: dict - Forge-specific options
    filtering:
        required_paths: [str] (default: ["docs"])
        ignore_files: [str] (default: [".docignore"])
        include_patterns: [str]
        exclude_patterns: [str]
    discovery:
        forge_concurrency: int (default: 4)
        probe_concurrency: int (default: 20)
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from forgescan.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_FORGE_CONCURRENCY = 4
DEFAULT_PROBE_CONCURRENCY = 20


class ForgeType(str, Enum):
    """Supported forge platforms."""

    GITHUB = "github"
    GITLAB = "gitlab"
    FORGEJO = "forgejo"


class AuthType(str, Enum):
    """Authentication methods for forge API and clone access."""

    TOKEN = "token"
    SSH = "ssh"
    BASIC = "basic"


@dataclass
class AuthConfig:
    """Credentials for one forge."""

    type: AuthType = AuthType.TOKEN
    token: str | None = None
    username: str | None = None
    password: str | None = None
    key_path: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthConfig":
        try:
            auth_type = AuthType(data.get("type", "token"))
        except ValueError:
            raise ConfigurationError(f"Invalid auth type: {data.get('type')}") from None
        return cls(
            type=auth_type,
            token=data.get("token"),
            username=data.get("username"),
            password=data.get("password"),
            key_path=data.get("key_path"),
        )


@dataclass
class WebhookConfig:
    """Webhook settings for one forge."""

    secret: str = ""
    path: str = ""
    events: list[str] = field(default_factory=list)
    register_auto: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookConfig":
        return cls(
            secret=data.get("secret", ""),
            path=data.get("path", ""),
            events=list(data.get("events") or []),
            register_auto=bool(data.get("register_auto", False)),
        )


@dataclass
class ForgeConfig:
    """Configuration for a single forge instance."""

    name: str
    type: ForgeType
    api_url: str = ""
    base_url: str = ""
    organizations: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    auth: AuthConfig | None = None
    webhook: WebhookConfig | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def targets(self) -> list[str]:
        """Explicitly configured organizations followed by groups."""
        return [*self.organizations, *self.groups]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ForgeConfig":
        name = data.get("name")
        if not name:
            raise ConfigurationError("Forge entry is missing 'name'")
        try:
            forge_type = ForgeType(str(data.get("type", "")).lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid forge type for {name}: {data.get('type')!r}. "
                f"Must be one of: {', '.join(t.value for t in ForgeType)}"
            ) from None

        auth = data.get("auth")
        webhook = data.get("webhook")
        return cls(
            name=name,
            type=forge_type,
            api_url=data.get("api_url", ""),
            base_url=data.get("base_url", ""),
            organizations=list(data.get("organizations") or []),
            groups=list(data.get("groups") or []),
            auth=AuthConfig.from_dict(auth) if auth else None,
            webhook=WebhookConfig.from_dict(webhook) if webhook else None,
            options=dict(data.get("options") or {}),
        )


@dataclass
class FilteringConfig:
    """Repository filtering policy."""

    required_paths: list[str] = field(default_factory=lambda: ["docs"])
    ignore_files: list[str] = field(default_factory=lambda: [".docignore"])
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilteringConfig":
        defaults = cls()
        return cls(
            required_paths=list(data.get("required_paths", defaults.required_paths) or []),
            ignore_files=list(data.get("ignore_files", defaults.ignore_files) or []),
            include_patterns=list(data.get("include_patterns") or []),
            exclude_patterns=list(data.get("exclude_patterns") or []),
        )


@dataclass
class DiscoveryConfig:
    """Concurrency ceilings for a discovery run."""

    forge_concurrency: int = DEFAULT_FORGE_CONCURRENCY
    probe_concurrency: int = DEFAULT_PROBE_CONCURRENCY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveryConfig":
        return cls(
            forge_concurrency=_as_int(
                data.get("forge_concurrency", DEFAULT_FORGE_CONCURRENCY), "discovery.forge_concurrency"
            ),
            probe_concurrency=_as_int(
                data.get("probe_concurrency", DEFAULT_PROBE_CONCURRENCY), "discovery.probe_concurrency"
            ),
        )


@dataclass
class Config:
    """Root configuration."""

    forges: list[ForgeConfig] = field(default_factory=list)
    filtering: FilteringConfig = field(default_factory=FilteringConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Build a configuration from a parsed YAML/JSON mapping.

        Raises:
            ConfigurationError: If an entry is malformed
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")
        forges = data.get("forges") or []
        if not isinstance(forges, list):
            raise ConfigurationError("'forges' must be a list")
        return cls(
            forges=[ForgeConfig.from_dict(f) for f in forges],
            filtering=FilteringConfig.from_dict(data.get("filtering") or {}),
            discovery=DiscoveryConfig.from_dict(data.get("discovery") or {}),
        )

    def validate(self) -> None:
        """
        Check cross-field constraints.

        Raises:
            ConfigurationError: On duplicate forge names or ceilings below 1
        """
        seen: set[str] = set()
        for forge in self.forges:
            if forge.name in seen:
                raise ConfigurationError(f"Duplicate forge name: {forge.name}")
            seen.add(forge.name)

        if self.discovery.forge_concurrency < 1:
            raise ConfigurationError("discovery.forge_concurrency must be >= 1")
        if self.discovery.probe_concurrency < 1:
            raise ConfigurationError("discovery.probe_concurrency must be >= 1")


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None


def token_env_var(forge_name: str) -> str:
    """Environment variable holding the token for ``forge_name``."""
    return "FORGESCAN_" + re.sub(r"[^A-Za-z0-9]", "_", forge_name).upper() + "_TOKEN"


def _apply_env_overrides(config: Config) -> None:
    forge_concurrency = os.environ.get("FORGESCAN_FORGE_CONCURRENCY")
    if forge_concurrency:
        config.discovery.forge_concurrency = _as_int(forge_concurrency, "FORGESCAN_FORGE_CONCURRENCY")
        logger.info(f"Forge concurrency override from env: {config.discovery.forge_concurrency}")

    probe_concurrency = os.environ.get("FORGESCAN_PROBE_CONCURRENCY")
    if probe_concurrency:
        config.discovery.probe_concurrency = _as_int(probe_concurrency, "FORGESCAN_PROBE_CONCURRENCY")
        logger.info(f"Probe concurrency override from env: {config.discovery.probe_concurrency}")

    for forge in config.forges:
        token = os.environ.get(token_env_var(forge.name))
        if not token:
            continue
        if forge.auth is None:
            forge.auth = AuthConfig(type=AuthType.TOKEN)
        forge.auth.token = token
        logger.debug(f"Token for forge {forge.name} taken from environment")


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration from a YAML file with environment variable overrides.

    Configuration Loading Order (later overrides earlier):
    1. Default values
    2. Config file (config_path parameter, else FORGESCAN_CONFIG_PATH)
    3. Environment variable overrides

    Args:
        config_path: Explicit config file path (overrides FORGESCAN_CONFIG_PATH)

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable, invalid YAML or invalid config
    """
    file_path = config_path or os.environ.get("FORGESCAN_CONFIG_PATH")

    data: dict[str, Any] = {}
    if file_path:
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}") from e
        logger.info(f"Loaded configuration from: {path}")
    else:
        logger.debug("No config file given, using defaults")

    config = Config.from_dict(data)
    _apply_env_overrides(config)
    config.validate()
    return config
