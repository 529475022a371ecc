"""
Investments component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InvestmentCounts:
    """Status tally for a list of investments."""

    total: int = 0
    linked: int = 0
    in_progress: int = 0
    archived: int = 0

    @property
    def unassigned(self) -> int:
        return self.total - self.linked - self.in_progress - self.archived
