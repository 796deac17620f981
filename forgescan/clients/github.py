"""GitHub forge client."""

import hashlib
import hmac
import json
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from forgescan.clients.base import HTTPForgeClient
from forgescan.config import ForgeType
from forgescan.exceptions import ConfigurationError, ValidationError
from forgescan.pagination import has_next_link, paginate
from forgescan.types import Organization, Repository, WebhookCommit, WebhookEvent, WebhookEventType


class GitHubClient(HTTPForgeClient):
    """Client for github.com and GitHub Enterprise."""

    forge_type = ForgeType.GITHUB
    default_api_url = "https://api.github.com"
    default_base_url = "https://github.com"
    extra_headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }

    def _fetch_list(self, endpoint: str) -> tuple[list[dict[str, Any]], bool]:
        data, headers = self.transport.request_with_headers("GET", endpoint)
        items = data or []
        return items, has_next_link(headers)

    def list_organizations(self) -> list[Organization]:
        """Return organizations of the authenticated user."""
        orgs = paginate("/user/orgs", self._fetch_list)
        return [
            Organization(
                id=str(o["id"]),
                name=o["login"],
                display_name=o.get("name") or o["login"],
                description=o.get("description") or "",
                type=o.get("type") or "Organization",
                metadata={"github_id": str(o["id"])},
            )
            for o in orgs
        ]

    def list_repositories(self, organizations: list[str]) -> list[Repository]:
        repos: list[Repository] = []
        for org in organizations:
            items = paginate(f"/orgs/{quote(org, safe='')}/repos?sort=updated", self._fetch_list)
            repos.extend(self._convert_repo(item) for item in items)
        return repos

    def get_repository(self, owner: str, name: str) -> Repository:
        data = self.transport.request("GET", f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}")
        return self._convert_repo(data)

    def _path_exists(self, repo: Repository, path: str, branch: str) -> bool:
        endpoint = f"{self._repo_path(repo)}/contents/{quote(path)}?ref={quote(branch, safe='')}"
        return self.transport.path_exists(endpoint)

    def validate_webhook(self, payload: bytes, signature: str, secret: str) -> bool:
        """Validate an ``X-Hub-Signature-256`` (or legacy ``X-Hub-Signature``) value."""
        if not signature or not secret:
            return False

        if signature.startswith("sha256="):
            digest = hashlib.sha256
            expected = signature[len("sha256="):]
        elif signature.startswith("sha1="):
            digest = hashlib.sha1
            expected = signature[len("sha1="):]
        else:
            return False

        calculated = hmac.new(secret.encode(), payload, digest).hexdigest()
        return hmac.compare_digest(expected, calculated)

    def parse_webhook_event(self, payload: bytes, event_type: str) -> WebhookEvent:
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ValidationError("INVALID_PAYLOAD", f"invalid webhook payload: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("repository"), dict):
            raise ValidationError("INVALID_PAYLOAD", f"missing repository in {event_type} event")
        repo = self._convert_repo(data["repository"])

        if event_type == "push":
            ref = data.get("ref", "")
            return WebhookEvent(
                type=WebhookEventType.PUSH,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                branch=ref.removeprefix("refs/heads/"),
                commits=[self._convert_commit(c) for c in data.get("commits") or []],
                metadata={
                    "ref": ref,
                    "head_commit": (data.get("head_commit") or {}).get("id", ""),
                },
            )

        if event_type == "repository":
            action = data.get("action", "")
            event = WebhookEvent(
                type=WebhookEventType.REPOSITORY,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                action=action,
                metadata={"action": action},
            )
            renamed_from = (((data.get("changes") or {}).get("repository") or {}).get("name") or {}).get("from")
            if action == "renamed" and renamed_from:
                event.changes = {"name_from": renamed_from, "name_to": repo.name}
            return event

        raise ValidationError("UNSUPPORTED_EVENT", f"unsupported event type: {event_type}")

    def register_webhook(self, repo: Repository, webhook_url: str) -> None:
        if self.config.webhook is None:
            raise ConfigurationError(f"webhook not configured for forge {self.config.name}")

        self.transport.request(
            "POST",
            f"{self._repo_path(repo)}/hooks",
            body={
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
        return f"{self.base_url}/{repo.full_name}/edit/{branch}/{file_path}"

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
                "github_id": str(data["id"]),
                "owner": owner.get("login", ""),
                "owner_type": owner.get("type", ""),
            },
        )
