"""
forgescan logging utilities.

Provides configurable logging for forge HTTP traffic, discovery runs and
filter decisions. Ensures no credentials (tokens, webhook secrets,
Authorization headers) are logged.
"""

import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from forgescan.types import FilterDecision, Repository

# Package loggers
_root_logger = logging.getLogger("forgescan")
_http_logger = logging.getLogger("forgescan.http")
_discovery_logger = logging.getLogger("forgescan.discovery")
_filtering_logger = logging.getLogger("forgescan.filtering")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Authorization header values
    (re.compile(r"(Bearer|token)\s+[A-Za-z0-9_\-\.=]{8,}"), r"\1 [REDACTED]"),
    # GitHub personal access tokens and GitLab PATs
    (re.compile(r"\b(ghp|gho|ghs|ghu|github_pat)_[A-Za-z0-9_]{16,}\b"), "[TOKEN_REDACTED]"),
    (re.compile(r"\bglpat-[A-Za-z0-9_\-]{16,}\b"), "[TOKEN_REDACTED]"),
    # Credentials embedded in clone URLs
    (re.compile(r"(https?://)[^/\s:@]+:[^/\s@]+@"), r"\1[REDACTED]@"),
    # Secret/token key-value pairs
    (re.compile(r"(secret|token|password|private_token)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_SENSITIVE_KEYS = {"authorization", "token", "secret", "password", "private-token"}

# Characters kept at each end of a truncated token
_TOKEN_PREVIEW_LENGTH = 4


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    discovery_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure forgescan logging.

    Args:
        level: Default log level for all forgescan loggers (default: INFO)
        http_level: Log level for forge HTTP request/response logging (default: same as level)
        discovery_level: Log level for discovery and filtering (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from forgescan.logging import configure_logging

        # Show every request sent to the forges
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)

    effective_discovery = discovery_level if discovery_level is not None else level
    _discovery_logger.setLevel(effective_discovery)
    _filtering_logger.setLevel(effective_discovery)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a forgescan logger.

    Args:
        name: Logger name suffix (e.g., "http", "discovery"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"forgescan.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask credentials in a string.

    Args:
        text: Text that may contain tokens, secrets or credentialed URLs

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def truncate_token(token: str) -> str:
    """
    Truncate a token for safe logging.

    Returns:
        Truncated token like "ghp_...wxyz", or a placeholder for short values
    """
    if len(token) <= _TOKEN_PREVIEW_LENGTH * 4:
        return "[REDACTED]"

    return f"{token[:_TOKEN_PREVIEW_LENGTH]}...{token[-_TOKEN_PREVIEW_LENGTH:]}"


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Keys to mask (default: authorization, token, secret, password, private-token)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Log a forge HTTP request at DEBUG level with credentials masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {mask_sensitive_data(url)}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
) -> None:
    """Log a forge HTTP response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {mask_sensitive_data(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _http_logger.debug(" | ".join(log_parts))


def log_filter_decision(
    forge_name: str,
    repo: "Repository",
    decision: "FilterDecision",
) -> None:
    """Log why a repository was excluded, at DEBUG level."""
    if decision.include or not _filtering_logger.isEnabledFor(logging.DEBUG):
        return

    message = f"Repository filtered out: forge={forge_name}, repository={repo.full_name}, reason={decision.reason.value}"
    if decision.detail:
        message += f", detail={decision.detail}"

    _filtering_logger.debug(message)


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "truncate_token",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_filter_decision",
]
