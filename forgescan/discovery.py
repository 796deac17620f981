"""
Repository discovery across all registered forges.

``DiscoveryService.discover_all`` fans out over forges (a few at a time),
and within each forge over documentation probes, then partitions every
repository with the filter engine. Failures are contained: a failed probe
affects one repository, a failed listing affects one forge, and the run as
a whole always produces a result.
"""

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from forgescan.clients.base import ForgeClient
from forgescan.concurrency import run_bounded
from forgescan.config import (
    DEFAULT_FORGE_CONCURRENCY,
    DEFAULT_PROBE_CONCURRENCY,
    Config,
    FilteringConfig,
    ForgeConfig,
)
from forgescan.exceptions import ConfigurationError, DiscoveryCancelledError, ForgeOperationError
from forgescan.filtering import decide
from forgescan.logging import log_filter_decision
from forgescan.registry import ForgeManager
from forgescan.types import (
    BuildRepository,
    DiscoveryResult,
    FilterDecision,
    Organization,
    Repository,
)

logger = logging.getLogger(__name__)


@dataclass
class ForgeDiscovery:
    """What one forge contributed to a run."""

    repositories: list[Repository] = field(default_factory=list)
    organizations: list[Organization] = field(default_factory=list)
    filtered: list[Repository] = field(default_factory=list)


class DiscoveryService:
    """
    Discovers repositories from every forge in a ForgeManager.

    Example:
        ```python
        from forgescan import DiscoveryService, ForgeManager, load_config

        config = load_config("forgescan.yaml")
        service = DiscoveryService.from_config(config)
        result = service.discover_all()

        for forge, error in result.errors.items():
            print(f"{forge} failed: {error}")
        print(result.to_json(indent=2))
        ```
    """

    def __init__(
        self,
        forge_manager: ForgeManager,
        filtering: FilteringConfig | None = None,
        forge_concurrency: int = DEFAULT_FORGE_CONCURRENCY,
        probe_concurrency: int = DEFAULT_PROBE_CONCURRENCY,
    ) -> None:
        """
        Initialize the discovery service.

        Args:
            forge_manager: Registry of forges to scan
            filtering: Inclusion policy (default: FilteringConfig())
            forge_concurrency: Forges discovered at the same time
            probe_concurrency: Documentation probes in flight per forge

        Raises:
            ConfigurationError: If a concurrency ceiling is below 1
        """
        if forge_concurrency < 1:
            raise ConfigurationError(f"forge_concurrency must be >= 1, got {forge_concurrency}")
        if probe_concurrency < 1:
            raise ConfigurationError(f"probe_concurrency must be >= 1, got {probe_concurrency}")

        self.forge_manager = forge_manager
        self.filtering = filtering if filtering is not None else FilteringConfig()
        self.forge_concurrency = forge_concurrency
        self.probe_concurrency = probe_concurrency

    @classmethod
    def from_config(cls, config: Config, forge_manager: ForgeManager | None = None) -> "DiscoveryService":
        """Build a service (and, unless given, its registry) from a loaded Config."""
        return cls(
            forge_manager if forge_manager is not None else ForgeManager.from_config(config),
            filtering=config.filtering,
            forge_concurrency=config.discovery.forge_concurrency,
            probe_concurrency=config.discovery.probe_concurrency,
        )

    def discover_all(self, cancel: threading.Event | None = None) -> DiscoveryResult:
        """
        Discover repositories from all registered forges.

        Per-forge failures never raise; they are recorded in ``result.errors``
        and the forge contributes no repositories. Forges and probes that had
        not started when ``cancel`` was set are skipped, and the result holds
        whatever was aggregated until then.

        Args:
            cancel: Optional cancellation signal

        Returns:
            The aggregated result
        """
        started = time.monotonic()
        result = DiscoveryResult()

        snapshot = self.forge_manager.snapshot()
        if not snapshot.clients:
            logger.info("No forges registered, nothing to discover")
            return result

        lock = threading.Lock()

        def discover_one(item: tuple[str, ForgeClient]) -> None:
            forge_name, client = item
            logger.info(f"Starting discovery: forge={forge_name}")
            try:
                discovered = self._discover_forge(client, snapshot.configs, cancel)
            except Exception as e:
                with lock:
                    result.errors[forge_name] = e
                logger.error(f"Discovery failed: forge={forge_name}: {e}")
                return

            with lock:
                result.repositories.extend(discovered.repositories)
                result.organizations[forge_name] = discovered.organizations
                result.filtered.extend(discovered.filtered)

            logger.info(
                f"Discovery completed: forge={forge_name}, repositories={len(discovered.repositories)}, "
                f"organizations={len(discovered.organizations)}, filtered={len(discovered.filtered)}"
            )

        forges = list(snapshot.clients.items())
        outcomes = run_bounded(
            forges, self.forge_concurrency, discover_one, cancel, thread_name_prefix="forgescan-forge"
        )

        skipped = [name for (name, _), outcome in zip(forges, outcomes) if outcome.error is not None]
        if skipped:
            logger.warning(f"Discovery cancelled before these forges started: {', '.join(skipped)}")

        result.duration = timedelta(seconds=time.monotonic() - started)
        logger.info(
            f"Discovery summary: total_repositories={len(result.repositories)}, "
            f"total_filtered={len(result.filtered)}, errors={len(result.errors)}, "
            f"duration={result.duration.total_seconds():.3f}s"
        )
        return result

    def _discover_forge(
        self,
        client: ForgeClient,
        configs: Mapping[str, ForgeConfig],
        cancel: threading.Event | None,
    ) -> ForgeDiscovery:
        """
        Discover, probe and filter the repositories of one forge.

        Raises:
            ConfigurationError: If the forge has no configuration
            ForgeOperationError: If the organization listing (auto-discovery
                mode) or the repository listing fails
        """
        forge_name = client.get_name()
        forge_config = configs.get(forge_name)
        if forge_config is None:
            raise ConfigurationError(f"forge configuration not found for {forge_name}")

        targets = forge_config.targets
        if not targets:
            logger.info(f"Entering auto-discovery mode (no organizations/groups configured): forge={forge_name}")
            try:
                organizations = client.list_organizations()
            except Exception as e:
                raise ForgeOperationError(forge_name, "list_organizations", str(e)) from e
            targets = [org.name for org in organizations]
            logger.info(f"Auto-discovered organizations: forge={forge_name}, count={len(organizations)}")

            try:
                repositories = client.list_repositories(targets)
            except Exception as e:
                raise ForgeOperationError(forge_name, "list_repositories", str(e)) from e
        else:
            organizations, repositories = self._list_concurrently(client, targets)

        repositories = self._tag_repositories(client, repositories)
        discovered = ForgeDiscovery(organizations=organizations)
        total = len(repositories)
        lock = threading.Lock()

        def probe(repo: Repository) -> FilterDecision:
            try:
                client.check_documentation(repo)
            except Exception as e:
                logger.warning(
                    f"Failed to check documentation status: forge={forge_name}, "
                    f"repository={repo.full_name}: {e}"
                )
                repo.has_docs = False
                repo.has_doc_ignore = False

            decision = decide(repo, self.filtering)
            with lock:
                if decision.include:
                    discovered.repositories.append(repo)
                else:
                    discovered.filtered.append(repo)
            log_filter_decision(forge_name, repo, decision)
            return decision

        outcomes = run_bounded(
            repositories, self.probe_concurrency, probe, cancel, thread_name_prefix=f"forgescan-probe-{forge_name}"
        )
        not_probed = sum(1 for outcome in outcomes if isinstance(outcome.error, DiscoveryCancelledError))
        if not_probed:
            logger.warning(f"Discovery cancelled: forge={forge_name}, repositories not probed={not_probed}")

        if total > 0 and not discovered.repositories and not not_probed:
            self._warn_all_filtered(forge_name, total)

        return discovered

    def _list_concurrently(
        self, client: ForgeClient, targets: list[str]
    ) -> tuple[list[Organization], list[Repository]]:
        """Fetch organization metadata and the repository listing in parallel.

        A metadata failure is downgraded to an empty list; a listing failure
        is raised.
        """
        forge_name = client.get_name()
        orgs_outcome, repos_outcome = run_bounded(
            [client.list_organizations, lambda: client.list_repositories(targets)],
            2,
            lambda call: call(),
            thread_name_prefix=f"forgescan-list-{forge_name}",
        )

        if repos_outcome.error is not None:
            raise ForgeOperationError(
                forge_name, "list_repositories", str(repos_outcome.error)
            ) from repos_outcome.error

        organizations = orgs_outcome.value
        if orgs_outcome.error is not None:
            logger.warning(f"Failed to get organization metadata: forge={forge_name}: {orgs_outcome.error}")
            organizations = []

        return organizations or [], repos_outcome.value or []

    def _tag_repositories(self, client: ForgeClient, repositories: list[Repository]) -> list[Repository]:
        """Add forge_name/forge_type metadata, keeping non-empty client-set values."""
        forge_name = client.get_name()
        forge_type = client.get_type().value

        tagged: list[Repository] = []
        for repo in repositories:
            if not repo.full_name:
                logger.warning(f"Dropping repository without full name: forge={forge_name}, id={repo.id}")
                continue
            if not repo.metadata.get("forge_name"):
                repo.metadata["forge_name"] = forge_name
            if not repo.metadata.get("forge_type"):
                repo.metadata["forge_type"] = forge_type
            tagged.append(repo)
        return tagged

    def _warn_all_filtered(self, forge_name: str, total: int) -> None:
        policy = self.filtering
        for pattern in policy.include_patterns:
            if "/" in pattern:
                logger.warning(
                    f"All repositories filtered: include pattern {pattern!r} is path-like "
                    "and may not match repository names"
                )
                break
        logger.warning(
            f"All repositories filtered out by configuration: forge={forge_name}, total_before={total}, "
            f"required_paths={policy.required_paths}, include_patterns={policy.include_patterns}, "
            f"exclude_patterns={policy.exclude_patterns}"
        )

    def convert_to_build_repositories(self, repos: list[Repository]) -> list[BuildRepository]:
        """Convert included repositories for the site-build pipeline, using each forge's auth."""
        configs = self.forge_manager.get_forge_configs()

        converted: list[BuildRepository] = []
        for repo in repos:
            forge_config = configs.get(repo.metadata.get("forge_name", ""))
            auth = forge_config.auth if forge_config is not None else None
            converted.append(repo.to_build_repository(auth))
        return converted
