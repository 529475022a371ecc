"""
Sorting component - Ordering of investments, conversations and messages.

All functions return new lists and never reorder their input in place.
Python's sort is stable, so ties keep their input order in both directions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from linkbox.components.status import get_state_priority, get_status_priority
from linkbox.domain.entities import Convo, EmailMsg, Investment

from .models import SortColumn, SortDirection, SortState

_SORT_KEYS: dict[str, Callable[[Investment], Any]] = {
    "id": lambda inv: inv.id,
    "entity": lambda inv: inv.investing_entity.lower(),
    "fund": lambda inv: inv.fund_name.lower(),
    "status": lambda inv: get_status_priority(inv.status),
    "last_activity": lambda inv: inv.last_activity_at,
}


def next_sort_state(current: SortState, target: SortColumn) -> SortState:
    """
    Sort state after choosing a column header.

    The same column cycles asc -> desc -> cleared; a different column
    starts ascending.
    """
    if current.column != target:
        return SortState(column=target, direction="asc")

    if current.direction == "asc":
        return SortState(column=target, direction="desc")
    if current.direction == "desc":
        return SortState()
    return SortState(column=target, direction="asc")


def sort_investments_by_default(investments: Iterable[Investment]) -> list[Investment]:
    """Status priority (in progress, linked, archived, unassigned), then id."""
    return sorted(investments, key=lambda inv: (get_status_priority(inv.status), inv.id))


def sort_investments(
    investments: Iterable[Investment],
    column: SortColumn | None = None,
    direction: SortDirection | None = None,
) -> list[Investment]:
    """
    Sort by the named column, or by the default order when no sort is active.
    """
    if not column or not direction:
        return sort_investments_by_default(investments)

    key = _SORT_KEYS.get(column)
    if key is None:
        return list(investments)

    return sorted(investments, key=key, reverse=direction == "desc")


def sort_conversations_by_priority(convos: Iterable[Convo]) -> list[Convo]:
    """State priority first, then most recent activity first."""
    by_recency = sorted(convos, key=lambda c: c.last_activity_at, reverse=True)
    return sorted(by_recency, key=lambda c: get_state_priority(c.state))


def sort_messages_newest_first(messages: Iterable[EmailMsg]) -> list[EmailMsg]:
    # Storage keeps insertion order; display is newest first.
    return sorted(messages, key=lambda m: m.ts, reverse=True)
