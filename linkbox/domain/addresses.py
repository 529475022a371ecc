"""
Structured email address parsing.

Snapshots written before addresses were stored as structured values carry
the "Display Name <address@host>" form. Parsing happens once, on load or
when a user types a recipient; nothing downstream re-parses strings.
"""

from __future__ import annotations

import re

_NAMED_ADDRESS = re.compile(r'^\s*"?(?P<name>[^"<]*?)"?\s*<(?P<address>[^<>]+)>\s*$')


def parse_address(raw: str) -> tuple[str, str | None]:
    """
    Split a raw address string into (address, display_name).

    Examples:
        "Landmark Admin <admin@landmark.com>" -> ("admin@landmark.com", "Landmark Admin")
        "<admin@landmark.com>" -> ("admin@landmark.com", None)
        "admin@landmark.com" -> ("admin@landmark.com", None)
    """
    match = _NAMED_ADDRESS.match(raw)
    if match is None:
        return raw.strip(), None

    name = match.group("name").strip() or None
    return match.group("address").strip(), name


def format_address(address: str, display_name: str | None = None) -> str:
    """Format as "Name <address>", or the bare address when unnamed."""
    if display_name:
        return f"{display_name} <{address}>"
    return address
