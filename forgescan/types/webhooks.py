"""Webhook event data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from forgescan.types.repos import Repository


class WebhookEventType(str, Enum):
    """Normalized webhook event kinds."""

    PUSH = "push"
    REPOSITORY = "repository"  # created, deleted, renamed, archived
    BRANCH = "branch"
    TAG = "tag"


@dataclass
class WebhookCommit:
    """A commit carried by a push event."""

    id: str
    message: str
    author: str
    timestamp: datetime | None
    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)


@dataclass
class WebhookEvent:
    """A forge webhook payload normalized across forge types."""

    type: WebhookEventType
    repository: Repository | None
    timestamp: datetime
    branch: str = ""
    commits: list[WebhookCommit] = field(default_factory=list)
    action: str = ""
    changes: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, str] = field(default_factory=dict)
