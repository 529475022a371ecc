"""
Status component - Status and state priorities, badges and labels.
"""

from .component import (
    STATE_PRIORITY,
    STATUS_PRIORITY,
    UNASSIGNED_PRIORITY,
    format_status,
    get_state_badges,
    get_state_priority,
    get_status_priority,
)
from .models import BadgeTone, StateBadge

__all__ = [
    # Functions
    "get_status_priority",
    "get_state_priority",
    "get_state_badges",
    "format_status",
    # Constants
    "STATUS_PRIORITY",
    "STATE_PRIORITY",
    "UNASSIGNED_PRIORITY",
    # Models
    "StateBadge",
    "BadgeTone",
]
