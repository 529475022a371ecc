"""
Status component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

BadgeTone = Literal["gray", "blue", "amber", "green"]


@dataclass(frozen=True)
class StateBadge:
    """Display descriptor for a conversation state."""

    text: str
    tone: BadgeTone
