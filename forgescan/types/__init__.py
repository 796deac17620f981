"""forgescan type definitions.

This module exports all data model types used by the package.
"""

from forgescan.types.discovery import DiscoveryResult, FilterDecision, FilterReason
from forgescan.types.repos import BuildRepository, Organization, Repository
from forgescan.types.webhooks import WebhookCommit, WebhookEvent, WebhookEventType

__all__ = [
    # Forge entities
    "Repository",
    "Organization",
    "BuildRepository",
    # Webhooks
    "WebhookEvent",
    "WebhookEventType",
    "WebhookCommit",
    # Discovery
    "FilterReason",
    "FilterDecision",
    "DiscoveryResult",
]
