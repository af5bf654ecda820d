"""Decision log enums and quota rules.

Pure domain logic with no external dependencies.
"""
from collections.abc import Iterable
from enum import Enum

# Free tier: maximum number of active (not yet reviewed) logs at creation time
FREE_TIER_LIMIT = 3


class DecisionStatus(str, Enum):
    """Decision lifecycle. Semantically Pending -> Decision Made -> Reviewing Outcome,
    but the user may move between them freely."""

    PENDING = "Pending"
    DECISION_MADE = "Decision Made"
    REVIEWING_OUTCOME = "Reviewing Outcome"


class KeyFactor(str, Enum):
    """Fixed set of categories a decision can touch."""

    CAREER = "Career"
    FINANCE = "Finance"
    RELATIONSHIP = "Relationship"
    HEALTH = "Health"
    EDUCATION = "Education"
    FAMILY = "Family"
    PERSONAL_GROWTH = "Personal Growth"


def is_active(status: DecisionStatus) -> bool:
    """A log counts toward the quota until its outcome is being reviewed."""
    return status is not DecisionStatus.REVIEWING_OUTCOME


def count_active(statuses: Iterable[DecisionStatus]) -> int:
    """Count statuses that still count toward the free-tier quota."""
    return sum(1 for status in statuses if is_active(status))


def quota_reached(active_count: int, limit: int = FREE_TIER_LIMIT) -> bool:
    """Check whether another log may be created.

    Only creation is gated; existing logs over the limit are never
    retroactively rejected, edited or removed.
    """
    return active_count >= limit


def split_lines(text: str) -> list[str]:
    """Split newline-delimited free text into trimmed, non-empty lines.

    Args:
        text: Raw textarea content (one entry per line)

    Returns:
        Lines in their original order with blank lines dropped
    """
    return [line.strip() for line in text.splitlines() if line.strip()]
