"""
Mock forge client for testing.

Provides a MockForgeClient that implements the ForgeClient contract from
in-memory data without making network calls.
"""

import dataclasses
import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from forgescan.clients.base import ForgeClient
from forgescan.config import ForgeType
from forgescan.exceptions import NotFoundError, ValidationError
from forgescan.types import Organization, Repository, WebhookEvent, WebhookEventType

T = TypeVar("T")


@dataclass
class MockResponse:
    """Configuration for a mock response."""

    data: Any
    error: Exception | None = None
    call_count: int = 0


@dataclass
class MockCall:
    """Record of a method call."""

    method: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MockForgeClient(ForgeClient):
    """
    Mock forge client for testing.

    Repositories registered with ``add_repository`` are returned by the
    listing calls with their documentation flags cleared; the flags given at
    registration are what ``check_documentation`` reports. Calls may come
    from many threads at once.

    Example:
        ```python
        from forgescan.testing import MockForgeClient, create_mock_repository

        mock = MockForgeClient(name="github-main")
        mock.add_repository(create_mock_repository("acme/docs", has_docs=True))
        mock.configure_check_documentation(
            error=TimeoutError("probe timed out"), repositories={"acme/flaky"}
        )

        repos = mock.list_repositories(["acme"])
        mock.check_documentation(repos[0])
        assert repos[0].has_docs

        assert mock.was_called("list_repositories")
        assert mock.call_count("check_documentation") == 1
        ```
    """

    def __init__(self, name: str = "mock-forge", forge_type: ForgeType = ForgeType.GITHUB) -> None:
        """
        Initialize the mock client.

        Args:
            name: Value returned by get_name()
            forge_type: Value returned by get_type()
        """
        self.name = name
        self.forge_type = forge_type

        self._lock = threading.Lock()
        self._calls: list[MockCall] = []
        self._responses: dict[str, MockResponse] = {}
        self._delays: dict[str, float] = {}

        self._repositories: list[Repository] = []
        self._organizations: list[Organization] = []
        self._docs: dict[str, tuple[bool, bool]] = {}
        self._probe_error: Exception | None = None
        self._probe_error_repos: set[str] | None = None

        self._probes_in_flight = 0
        self.max_probes_in_flight = 0
        self.registered_webhooks: list[tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_repository(self, repo: Repository) -> None:
        """Register a repository; its has_docs/has_doc_ignore become the probe truth."""
        with self._lock:
            self._repositories.append(repo)
            self._docs[repo.full_name] = (repo.has_docs, repo.has_doc_ignore)

    def add_organization(self, org: Organization) -> None:
        with self._lock:
            self._organizations.append(org)

    def configure_list_organizations(
        self,
        response: list[Organization] | None = None,
        error: Exception | None = None,
    ) -> None:
        """Configure the response for list_organizations() calls."""
        self._responses["list_organizations"] = MockResponse(data=response, error=error)

    def configure_list_repositories(
        self,
        response: list[Repository] | None = None,
        error: Exception | None = None,
    ) -> None:
        """Configure the response for list_repositories() calls."""
        self._responses["list_repositories"] = MockResponse(data=response, error=error)

    def configure_check_documentation(
        self,
        error: Exception | None = None,
        repositories: set[str] | None = None,
    ) -> None:
        """
        Make check_documentation() raise.

        Args:
            error: Exception to raise (None clears the configuration)
            repositories: Full names that fail; None means every repository
        """
        self._probe_error = error
        self._probe_error_repos = set(repositories) if repositories is not None else None

    def with_delay(self, method: str, seconds: float) -> "MockForgeClient":
        """Sleep ``seconds`` at the start of every call to ``method``."""
        self._delays[method] = seconds
        return self

    # ------------------------------------------------------------------
    # ForgeClient
    # ------------------------------------------------------------------

    def get_type(self) -> ForgeType:
        return self.forge_type

    def get_name(self) -> str:
        return self.name

    def list_organizations(self) -> list[Organization]:
        """Mock list_organizations method."""
        self._record_call("list_organizations", (), {})
        self._delay("list_organizations")
        with self._lock:
            default = [dataclasses.replace(o, metadata=dict(o.metadata)) for o in self._organizations]
        return self._get_response("list_organizations", default)

    def list_repositories(self, organizations: list[str]) -> list[Repository]:
        """Mock list_repositories method.

        Only repositories owned by one of ``organizations`` are returned,
        or all of them when the list is empty.
        """
        self._record_call("list_repositories", (list(organizations),), {})
        self._delay("list_repositories")
        wanted = set(organizations)
        with self._lock:
            default = [
                self._listing_copy(repo)
                for repo in self._repositories
                if not wanted or repo.owner in wanted
            ]
        return self._get_response("list_repositories", default)

    def get_repository(self, owner: str, name: str) -> Repository:
        """Mock get_repository method."""
        self._record_call("get_repository", (owner, name), {})
        full_name = f"{owner}/{name}"
        with self._lock:
            for repo in self._repositories:
                if repo.full_name == full_name:
                    return self._listing_copy(repo)
        raise NotFoundError("NOT_FOUND", f"repository {full_name} not found")

    def check_documentation(self, repo: Repository) -> None:
        """Mock check_documentation method."""
        self._record_call("check_documentation", (repo.full_name,), {})
        with self._lock:
            self._probes_in_flight += 1
            self.max_probes_in_flight = max(self.max_probes_in_flight, self._probes_in_flight)
        try:
            self._delay("check_documentation")
            error = self._probe_error
            if error is not None and (
                self._probe_error_repos is None or repo.full_name in self._probe_error_repos
            ):
                raise error
            with self._lock:
                repo.has_docs, repo.has_doc_ignore = self._docs.get(repo.full_name, (False, False))
        finally:
            with self._lock:
                self._probes_in_flight -= 1

    def validate_webhook(self, payload: bytes, signature: str, secret: str) -> bool:
        """Accept a request whose signature equals the secret."""
        self._record_call("validate_webhook", (payload, signature), {})
        return bool(secret) and signature == secret

    def parse_webhook_event(self, payload: bytes, event_type: str) -> WebhookEvent:
        """Parse a minimal push payload: {"ref": ..., "repository": {"full_name": ...}}."""
        self._record_call("parse_webhook_event", (payload, event_type), {})
        if event_type != "push":
            raise ValidationError("UNSUPPORTED_EVENT", f"unsupported event type: {event_type}")
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ValidationError("INVALID_PAYLOAD", f"invalid webhook payload: {e}") from e

        full_name = (data.get("repository") or {}).get("full_name", "")
        repo = None
        if full_name:
            owner, _, name = full_name.rpartition("/")
            repo = Repository(id=full_name, name=name, full_name=full_name)
            repo.metadata["owner"] = owner
        return WebhookEvent(
            type=WebhookEventType.PUSH,
            repository=repo,
            timestamp=datetime.now(timezone.utc),
            branch=data.get("ref", "").removeprefix("refs/heads/"),
        )

    def register_webhook(self, repo: Repository, webhook_url: str) -> None:
        """Mock register_webhook method."""
        self._record_call("register_webhook", (repo.full_name, webhook_url), {})
        with self._lock:
            self.registered_webhooks.append((repo.full_name, webhook_url))

    def get_edit_url(self, repo: Repository, file_path: str, branch: str) -> str:
        return f"https://{self.name}.example.com/{repo.full_name}/edit/{branch}/{file_path}"

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def _record_call(
        self,
        method: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        """Record a method call for verification."""
        with self._lock:
            self._calls.append(MockCall(method=method, args=args, kwargs=kwargs))

    def was_called(self, method: str) -> bool:
        """
        Check if a method was called.

        Args:
            method: Method name (e.g., "list_repositories")

        Returns:
            True if the method was called at least once
        """
        with self._lock:
            return any(call.method == method for call in self._calls)

    def call_count(self, method: str) -> int:
        """Get the number of times a method was called."""
        with self._lock:
            return sum(1 for call in self._calls if call.method == method)

    def get_calls(self, method: str | None = None) -> list[MockCall]:
        """
        Get recorded calls, optionally filtered by method.

        Args:
            method: Optional method name to filter by

        Returns:
            List of MockCall objects
        """
        with self._lock:
            if method is None:
                return list(self._calls)
            return [call for call in self._calls if call.method == method]

    def reset(self) -> None:
        """Reset recorded calls and configured responses; registered data is kept."""
        with self._lock:
            self._calls.clear()
            self._responses.clear()
            self._delays.clear()
            self._probe_error = None
            self._probe_error_repos = None
            self.max_probes_in_flight = 0
            self.registered_webhooks.clear()

    def close(self) -> None:
        """No-op for compatibility with real clients."""
        pass

    def __enter__(self) -> "MockForgeClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _delay(self, method: str) -> None:
        seconds = self._delays.get(method)
        if seconds:
            time.sleep(seconds)

    @staticmethod
    def _listing_copy(repo: Repository) -> Repository:
        return dataclasses.replace(
            repo,
            has_docs=False,
            has_doc_ignore=False,
            topics=list(repo.topics),
            metadata=dict(repo.metadata),
        )

    def _get_response(self, method: str, default: T) -> T:
        """Get configured response or default."""
        if method in self._responses:
            resp = self._responses[method]
            with self._lock:
                resp.call_count += 1
            if resp.error:
                raise resp.error
            if resp.data is not None:
                return resp.data
        return default


__all__ = [
    "MockForgeClient",
    "MockCall",
    "MockResponse",
]
