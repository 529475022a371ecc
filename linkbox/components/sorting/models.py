"""
Sorting component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SortColumn = Literal["id", "entity", "fund", "status", "last_activity"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class SortState:
    """Active sort of an investment table; both None means default order."""

    column: SortColumn | None = None
    direction: SortDirection | None = None

    @property
    def active(self) -> bool:
        return self.column is not None and self.direction is not None
