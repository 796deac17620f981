"""Filter decision and discovery result models."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from forgescan.types.repos import Organization, Repository


class FilterReason(str, Enum):
    """Machine-readable reason attached to every filter decision."""

    ARCHIVED = "archived"
    DOCIGNORE_PRESENT = "docignore_present"
    MISSING_REQUIRED_PATHS = "missing_required_paths"
    INCLUDE_PATTERNS_MISS = "include_patterns_miss"
    EXCLUDE_PATTERNS_MATCH = "exclude_patterns_match"
    INCLUDED = "included"


@dataclass(frozen=True)
class FilterDecision:
    """Outcome of applying the filtering policy to one repository."""

    include: bool
    reason: FilterReason
    detail: str | None = None


@dataclass
class DiscoveryResult:
    """Aggregate result of one discovery run across all forges."""

    repositories: list[Repository] = field(default_factory=list)
    filtered: list[Repository] = field(default_factory=list)
    organizations: dict[str, list[Organization]] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration: timedelta = field(default_factory=timedelta)

    @property
    def has_errors(self) -> bool:
        """True when at least one forge failed entirely."""
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; ``duration`` is in integer nanoseconds."""
        return {
            "repositories": [r.to_dict() for r in self.repositories],
            "organizations": {
                forge: [o.to_dict() for o in orgs] for forge, orgs in self.organizations.items()
            },
            "filtered": [r.to_dict() for r in self.filtered],
            "errors": {forge: str(err) for forge, err in self.errors.items()},
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration // timedelta(microseconds=1) * 1000,
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
