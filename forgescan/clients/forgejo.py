"""Forgejo (and Gitea) forge client."""

import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from forgescan.clients.base import HTTPForgeClient
from forgescan.config import FilteringConfig, ForgeConfig, ForgeType
from forgescan.exceptions import ConfigurationError, ForgeScanError, ValidationError
from forgescan.pagination import paginate
from forgescan.types import Organization, Repository, WebhookCommit, WebhookEvent, WebhookEventType

logger = logging.getLogger(__name__)

PAGE_SIZE = 50


class ForgejoClient(HTTPForgeClient):
    """Client for Forgejo/Gitea instances."""

    forge_type = ForgeType.FORGEJO
    auth_header_prefix = "token "

    def __init__(
        self,
        config: ForgeConfig,
        filtering: FilteringConfig | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not config.api_url:
            raise ConfigurationError(f"Forge {config.name} requires api_url")
        super().__init__(config, filtering, timeout, http_client)
        if not self.base_url:
            self.base_url = self.api_url.removesuffix("/api/v1")

    def _fetch_list(self, endpoint: str) -> tuple[list[dict[str, Any]], bool]:
        items = self.transport.request("GET", endpoint) or []
        return items, len(items) == PAGE_SIZE

    def _paginate(self, endpoint: str) -> list[dict[str, Any]]:
        return paginate(endpoint, self._fetch_list, page_size=PAGE_SIZE, limit_param="limit")

    def list_organizations(self) -> list[Organization]:
        return [
            Organization(
                id=str(o["id"]),
                name=o["username"],
                display_name=o.get("full_name") or o["username"],
                description=o.get("description") or "",
                type="organization",
                metadata={"forgejo_id": str(o["id"]), "visibility": o.get("visibility") or ""},
            )
            for o in self._paginate("/user/orgs")
        ]

    def list_repositories(self, organizations: list[str]) -> list[Repository]:
        """Return the user's repositories merged with those of each organization.

        An organization whose listing fails is skipped with a warning; only a
        failure of every source is raised.
        """
        repos: dict[str, Repository] = {}
        failures: list[ForgeScanError] = []

        try:
            for item in self._paginate("/user/repos"):
                repo = self._convert_repo(item)
                repos[repo.full_name] = repo
        except ForgeScanError as e:
            logger.warning(f"Forgejo {self.get_name()}: failed to list user repositories: {e}")
            failures.append(e)

        for org in organizations:
            try:
                items = self._paginate(f"/orgs/{quote(org, safe='')}/repos")
            except ForgeScanError as e:
                logger.warning(f"Forgejo {self.get_name()}: skipping organization {org}: {e}")
                failures.append(e)
                continue
            for item in items:
                repo = self._convert_repo(item)
                repos[repo.full_name] = repo

        if failures and len(failures) == len(organizations) + 1:
            raise failures[0]
        return list(repos.values())

    def get_repository(self, owner: str, name: str) -> Repository:
        data = self.transport.request("GET", f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}")
        return self._convert_repo(data)

    def _path_exists(self, repo: Repository, path: str, branch: str) -> bool:
        endpoint = f"{self._repo_path(repo)}/contents/{quote(path)}?ref={quote(branch, safe='')}"
        return self.transport.path_exists(endpoint)

    def validate_webhook(self, payload: bytes, signature: str, secret: str) -> bool:
        """Validate an ``X-Forgejo-Signature`` / ``X-Gitea-Signature`` HMAC-SHA256 hex digest."""
        if not signature or not secret:
            return False
        calculated = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
        return hmac.compare_digest(signature.removeprefix("sha256="), calculated)

    def parse_webhook_event(self, payload: bytes, event_type: str) -> WebhookEvent:
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ValidationError("INVALID_PAYLOAD", f"invalid webhook payload: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("INVALID_PAYLOAD", "webhook payload must be an object")

        raw_repo = data.get("repository")
        repo = self._convert_repo(raw_repo) if isinstance(raw_repo, dict) else None

        if event_type == "push":
            ref = data.get("ref", "")
            return WebhookEvent(
                type=WebhookEventType.PUSH,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                branch=ref.removeprefix("refs/heads/"),
                commits=[self._convert_commit(c) for c in data.get("commits") or []],
                metadata={"ref": ref, "before": data.get("before", ""), "after": data.get("after", "")},
            )

        if event_type == "repository":
            action = data.get("action", "")
            return WebhookEvent(
                type=WebhookEventType.REPOSITORY,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                action=action,
                metadata={"action": action},
            )

        raise ValidationError("UNSUPPORTED_EVENT", f"unsupported event type: {event_type}")

    def register_webhook(self, repo: Repository, webhook_url: str) -> None:
        if self.config.webhook is None:
            raise ConfigurationError(f"webhook not configured for forge {self.config.name}")

        self.transport.request(
            "POST",
            f"{self._repo_path(repo)}/hooks",
            body={
                "type": "forgejo",
                "config": {
                    "url": webhook_url,
                    "content_type": "json",
                    "secret": self.config.webhook.secret,
                },
                "events": self.config.webhook.events or ["push", "repository"],
                "active": True,
            },
        )

    def get_edit_url(self, repo: Repository, file_path: str, branch: str) -> str:
        return f"{self.base_url}/{repo.full_name}/_edit/{branch}/{file_path}"

    def _convert_commit(self, data: dict[str, Any]) -> WebhookCommit:
        return WebhookCommit(
            id=data.get("id", ""),
            message=data.get("message", ""),
            author=(data.get("author") or {}).get("name", ""),
            timestamp=self.parse_timestamp(data.get("timestamp")),
            added=list(data.get("added") or []),
            modified=list(data.get("modified") or []),
            removed=list(data.get("removed") or []),
        )

    def _convert_repo(self, data: dict[str, Any]) -> Repository:
        owner = data.get("owner") or {}
        return Repository(
            id=str(data["id"]),
            name=data["name"],
            full_name=data["full_name"],
            clone_url=data.get("clone_url") or "",
            ssh_url=data.get("ssh_url") or "",
            default_branch=data.get("default_branch") or "",
            description=data.get("description") or "",
            language=data.get("language") or "",
            topics=list(data.get("topics") or []),
            private=bool(data.get("private", False)),
            archived=bool(data.get("archived", False)),
            last_updated=self.parse_timestamp(data.get("updated_at")),
            metadata={
                "forgejo_id": str(data["id"]),
                "owner": owner.get("login") or owner.get("username") or "",
            },
        )
