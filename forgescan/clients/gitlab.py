"""GitLab forge client."""

import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from forgescan.clients.base import HTTPForgeClient
from forgescan.config import ForgeType
from forgescan.exceptions import ConfigurationError, ForgeScanError, ValidationError
from forgescan.pagination import paginate
from forgescan.types import Organization, Repository, WebhookCommit, WebhookEvent, WebhookEventType

logger = logging.getLogger(__name__)

_PUSH_EVENTS = {"push", "Push Hook"}
_TAG_PUSH_EVENTS = {"tag_push", "Tag Push Hook"}
_REPOSITORY_EVENTS = {"repository", "Repository Update Hook"}


class GitLabClient(HTTPForgeClient):
    """Client for gitlab.com and self-managed GitLab."""

    forge_type = ForgeType.GITLAB
    default_api_url = "https://gitlab.com/api/v4"
    default_base_url = "https://gitlab.com"

    def _fetch_list(self, endpoint: str) -> tuple[list[dict[str, Any]], bool]:
        data, headers = self.transport.request_with_headers("GET", endpoint)
        return data or [], bool(headers.get("X-Next-Page"))

    def list_organizations(self) -> list[Organization]:
        """Return accessible groups.

        The organization ``name`` is the numeric group id: the projects
        endpoint does not accept group names or paths.
        """
        groups = paginate("/groups?order_by=name", self._fetch_list)
        return [
            Organization(
                id=str(g["id"]),
                name=str(g["id"]),
                display_name=g.get("name") or "",
                description=g.get("description") or "",
                type=g.get("kind") or "group",
                metadata={
                    "gitlab_id": str(g["id"]),
                    "full_path": g.get("full_path") or "",
                    "full_name": g.get("full_name") or "",
                },
            )
            for g in groups
        ]

    def list_repositories(self, organizations: list[str]) -> list[Repository]:
        repos: list[Repository] = []
        for group in organizations:
            endpoint = (
                f"/groups/{quote(group, safe='')}/projects"
                "?order_by=last_activity_at&include_subgroups=true"
            )
            repos.extend(self._convert_project(p) for p in paginate(endpoint, self._fetch_list))
        return repos

    def get_repository(self, owner: str, name: str) -> Repository:
        project = quote(f"{owner}/{name}", safe="")
        return self._convert_project(self.transport.request("GET", f"/projects/{project}"))

    def _path_exists(self, repo: Repository, path: str, branch: str) -> bool:
        endpoint = (
            f"/projects/{quote(repo.id, safe='')}/repository/tree"
            f"?path={quote(path, safe='')}&ref={quote(branch, safe='')}&per_page=1"
        )
        return self.transport.path_exists(endpoint)

    def check_documentation(self, repo: Repository) -> None:
        """Probe documentation, falling back to "master" when no default branch is known.

        Ignore files are only looked up when documentation exists.
        """
        branch = repo.default_branch or "main"
        try:
            has_docs = self._any_path_exists(repo, self.doc_paths, branch)
        except ForgeScanError:
            if repo.default_branch:
                raise
            branch = "master"
            has_docs = self._any_path_exists(repo, self.doc_paths, branch)

        repo.has_docs = has_docs
        repo.has_doc_ignore = has_docs and self._any_path_exists(repo, self.ignore_files, branch)

    def validate_webhook(self, payload: bytes, signature: str, secret: str) -> bool:
        """GitLab sends the shared secret itself in ``X-Gitlab-Token``."""
        if not signature or not secret:
            return False
        return hmac.compare_digest(signature, secret)

    def parse_webhook_event(self, payload: bytes, event_type: str) -> WebhookEvent:
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ValidationError("INVALID_PAYLOAD", f"invalid webhook payload: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("INVALID_PAYLOAD", "webhook payload must be an object")

        project = data.get("project")
        repo = self._convert_project(project) if isinstance(project, dict) else None
        ref = data.get("ref", "")

        if event_type in _PUSH_EVENTS:
            return WebhookEvent(
                type=WebhookEventType.PUSH,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                branch=ref.removeprefix("refs/heads/"),
                commits=[self._convert_commit(c) for c in data.get("commits") or []],
                metadata={"ref": ref, "checkout_sha": data.get("checkout_sha") or ""},
            )

        if event_type in _TAG_PUSH_EVENTS:
            return WebhookEvent(
                type=WebhookEventType.TAG,
                repository=repo,
                timestamp=datetime.now(timezone.utc),
                metadata={"ref": ref, "tag": ref.removeprefix("refs/tags/")},
            )

        if event_type in _REPOSITORY_EVENTS:
            action = data.get("event_name", "")
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

        events = set(self.config.webhook.events or ["push", "tag_push"])
        self.transport.request(
            "POST",
            f"/projects/{quote(repo.id, safe='')}/hooks",
            body={
                "url": webhook_url,
                "token": self.config.webhook.secret,
                "push_events": "push" in events,
                "tag_push_events": "tag_push" in events,
                "enable_ssl_verification": True,
            },
        )

    def get_edit_url(self, repo: Repository, file_path: str, branch: str) -> str:
        return f"{self.base_url}/{repo.full_name}/-/edit/{branch}/{file_path}"

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

    def _convert_project(self, data: dict[str, Any]) -> Repository:
        namespace = data.get("namespace") or {}
        return Repository(
            id=str(data["id"]),
            name=data.get("path") or data.get("name", ""),
            full_name=data.get("path_with_namespace", ""),
            clone_url=data.get("http_url_to_repo") or "",
            ssh_url=data.get("ssh_url_to_repo") or "",
            default_branch=data.get("default_branch") or "",
            description=data.get("description") or "",
            topics=list(data.get("topics") or data.get("tag_list") or []),
            private=data.get("visibility", "private") != "public",
            archived=bool(data.get("archived", False)),
            last_updated=self.parse_timestamp(data.get("last_activity_at")),
            metadata={
                "gitlab_id": str(data["id"]),
                "namespace": namespace.get("full_path", ""),
                "visibility": data.get("visibility", ""),
            },
        )
