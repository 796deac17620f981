"""
Repository filter engine.

Pure functions: the same repository and policy always produce the same
decision. Rules are evaluated in a fixed order and the first match wins.
"""

from forgescan.config import FilteringConfig
from forgescan.types import FilterDecision, FilterReason, Repository


def matches_pattern(value: str, pattern: str) -> bool:
    """
    Check a repository name against a glob-style pattern.

    Supported forms:
        ``*``        matches everything
        ``name``     exact match
        ``*part*``   containment (case-insensitive); checked before the two below
        ``prefix*``  prefix match
        ``*suffix``  suffix match

    Anything else does not match; patterns are not regular expressions.
    """
    if pattern == "*":
        return True

    if pattern == value:
        return True

    if len(pattern) > 2 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1].lower() in value.lower()

    if len(pattern) > 1 and pattern.endswith("*"):
        return value.startswith(pattern[:-1])

    if len(pattern) > 1 and pattern.startswith("*"):
        return value.endswith(pattern[1:])

    return False


def _first_match(repo: Repository, patterns: list[str]) -> str | None:
    for pattern in patterns:
        if matches_pattern(repo.name, pattern) or matches_pattern(repo.full_name, pattern):
            return pattern
    return None


def decide(repo: Repository, policy: FilteringConfig) -> FilterDecision:
    """
    Decide whether a repository is published.

    Evaluation order:
        1. archived
        2. opt-out marker (.docignore) present
        3. required paths configured but no documentation found
        4. include patterns configured and none match
        5. an exclude pattern matches (detail carries the pattern)
        6. included
    """
    if repo.archived:
        return FilterDecision(include=False, reason=FilterReason.ARCHIVED)

    if repo.has_doc_ignore:
        return FilterDecision(include=False, reason=FilterReason.DOCIGNORE_PRESENT)

    if policy.required_paths and not repo.has_docs:
        return FilterDecision(include=False, reason=FilterReason.MISSING_REQUIRED_PATHS)

    if policy.include_patterns and _first_match(repo, policy.include_patterns) is None:
        return FilterDecision(include=False, reason=FilterReason.INCLUDE_PATTERNS_MISS)

    excluded_by = _first_match(repo, policy.exclude_patterns)
    if excluded_by is not None:
        return FilterDecision(
            include=False,
            reason=FilterReason.EXCLUDE_PATTERNS_MATCH,
            detail=excluded_by,
        )

    return FilterDecision(include=True, reason=FilterReason.INCLUDED)
