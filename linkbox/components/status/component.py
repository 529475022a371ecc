"""
Status component - Priority tables for investment statuses and conversation states.

Priorities drive every default ordering: open work first, finished work
after, unassigned investments last.
"""

from __future__ import annotations

from linkbox.domain.entities import ConvoState

from .models import StateBadge

# --- Priority Tables ---

UNASSIGNED_PRIORITY = 4

STATUS_PRIORITY: dict[str, int] = {
    "in_progress": 1,
    "linked": 2,
    "archived": 3,
}

STATE_PRIORITY: dict[str, int] = {
    "PENDING_ARCH": 1,
    "PENDING_FUND": 2,
    "CLOSED": 3,
    "NO_RESPONSE": 4,
}

_STATE_BADGES: dict[str, tuple[StateBadge, ...]] = {
    "NO_RESPONSE": (StateBadge("no response", "gray"),),
    "PENDING_FUND": (StateBadge("pending fund reply", "blue"),),
    "PENDING_ARCH": (StateBadge("arch response needed", "amber"),),
    "CLOSED": (StateBadge("closed", "gray"), StateBadge("no response", "gray")),
}


def get_status_priority(status: str | None) -> int:
    """Sort key for an investment status; None and unknown values sort last."""
    if not status:
        return UNASSIGNED_PRIORITY
    return STATUS_PRIORITY.get(status, UNASSIGNED_PRIORITY)


def get_state_priority(state: ConvoState) -> int:
    """Sort key for a conversation state; states needing our reply come first."""
    return STATE_PRIORITY.get(state, len(STATE_PRIORITY) + 1)


def get_state_badges(state: ConvoState) -> tuple[StateBadge, ...]:
    return _STATE_BADGES.get(state, ())


def format_status(status: str | None) -> str:
    """Human label for a status ("in_progress" -> "in progress")."""
    if status is None:
        return "unassigned"
    return status.replace("_", " ")
