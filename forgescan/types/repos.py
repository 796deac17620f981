"""Repository and organization data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from forgescan.config import AuthConfig, AuthType


@dataclass
class Repository:
    """A repository discovered on a forge."""

    id: str
    name: str
    full_name: str  # "org/name"
    clone_url: str = ""
    ssh_url: str = ""
    default_branch: str = ""
    description: str = ""
    language: str = ""
    topics: list[str] = field(default_factory=list)
    private: bool = False
    archived: bool = False
    has_docs: bool = False  # set by the documentation probe
    has_doc_ignore: bool = False  # set by the documentation probe
    last_updated: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def owner(self) -> str:
        """Namespace part of ``full_name`` (empty if there is none)."""
        owner, _, _ = self.full_name.rpartition("/")
        return owner

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "full_name": self.full_name,
            "clone_url": self.clone_url,
            "ssh_url": self.ssh_url,
            "default_branch": self.default_branch,
            "description": self.description,
            "private": self.private,
            "archived": self.archived,
            "has_docs": self.has_docs,
            "has_docignore": self.has_doc_ignore,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "topics": list(self.topics),
            "language": self.language,
            "metadata": dict(self.metadata),
        }

    def to_build_repository(self, auth: AuthConfig | None = None) -> "BuildRepository":
        """
        Convert to the form consumed by the site-build pipeline.

        The SSH clone URL is used when ``auth`` is SSH and one is known.
        """
        url = self.clone_url
        if auth is not None and auth.type == AuthType.SSH and self.ssh_url:
            url = self.ssh_url

        return BuildRepository(
            url=url,
            name=self.name,
            branch=self.default_branch,
            auth=auth,
            paths=["docs"],
            tags={
                "forge_id": self.id,
                "full_name": self.full_name,
                "description": self.description,
                "language": self.language,
                "private": str(self.private).lower(),
                "has_docs": str(self.has_docs).lower(),
                "last_updated": self.last_updated.isoformat() if self.last_updated else "",
                "forge_type": self.metadata.get("forge_type", ""),
            },
        )


@dataclass
class Organization:
    """An organization, group or user namespace on a forge.

    ``name`` is whatever the client's repository listing accepts, which is
    not always a human-readable slug (GitLab wants the numeric group id).
    """

    id: str
    name: str
    display_name: str = ""
    description: str = ""
    type: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "type": self.type,
            "metadata": dict(self.metadata),
        }


@dataclass
class BuildRepository:
    """A repository entry handed to the site-build pipeline."""

    url: str
    name: str
    branch: str
    auth: AuthConfig | None
    paths: list[str]
    tags: dict[str, str]
