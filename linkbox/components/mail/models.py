"""
Mail component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AutocompleteOption:
    """Recipient suggestion built from a thread's inbound senders."""

    email: str
    label: str
    display_name: str
