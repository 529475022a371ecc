"""
Sorting component - Investment, conversation and message ordering.
"""

from .component import (
    next_sort_state,
    sort_conversations_by_priority,
    sort_investments,
    sort_investments_by_default,
    sort_messages_newest_first,
)
from .models import SortColumn, SortDirection, SortState

__all__ = [
    # Entry points
    "sort_investments",
    "sort_investments_by_default",
    "sort_conversations_by_priority",
    "sort_messages_newest_first",
    "next_sort_state",
    # Models
    "SortState",
    "SortColumn",
    "SortDirection",
]
