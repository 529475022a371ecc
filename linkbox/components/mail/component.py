"""
Mail component - Addressing helpers for conversation threads.

Key behaviors:
- Each conversation gets an ops alias address: first.last-<token>@<domain>
- The firm's address is taken from the first inbound message not sent by ops
- Autocomplete suggests every distinct inbound firm address of a thread
"""

from __future__ import annotations

from linkbox.domain.entities import Convo, EmailAddress, EmailMsg, OpsMember, SenderRole
from linkbox.ports.tokens import TokenPort

from .models import AutocompleteOption

FIRM_ROLES: frozenset[str] = frozenset({"ADMIN", "FUND", "CLIENT"})


def alias_for_ops(ops: OpsMember, tokens: TokenPort, domain: str, token_length: int = 5) -> str:
    """Generate a per-conversation reply-to alias for an ops member."""
    local = f"{ops.first_name.lower()}.{ops.last_name.lower()}-{tokens.token(token_length)}"
    return f"{local}@{domain}"


def is_firm_sender(role: SenderRole) -> bool:
    return role in FIRM_ROLES


def _is_inbound_from_firm(message: EmailMsg) -> bool:
    return message.direction == "IN" and is_firm_sender(message.from_role)


def get_incoming_email_addresses(convo: Convo) -> list[str]:
    """Distinct sender addresses of inbound, non-ops messages, sorted."""
    return sorted({m.sender.address for m in convo.messages if _is_inbound_from_firm(m)})


def get_display_name_for_email(convo: Convo, address: str) -> str:
    """Display name of the first inbound message from `address`, else the address."""
    for message in convo.messages:
        if _is_inbound_from_firm(message) and message.sender.address == address:
            return message.sender.display_name or address
    return address


def create_email_autocomplete_options(convo: Convo) -> list[AutocompleteOption]:
    options = []
    for email in get_incoming_email_addresses(convo):
        display_name = get_display_name_for_email(convo, email)
        label = f"{display_name} <{email}>" if display_name != email else email
        options.append(AutocompleteOption(email=email, label=label, display_name=display_name))
    return options


def resolve_firm_address(convo: Convo, fallback: str) -> EmailAddress:
    """The firm's address for this thread, or the fallback when it never replied."""
    for message in convo.messages:
        if _is_inbound_from_firm(message):
            return message.sender
    return EmailAddress(address=fallback)


def build_preview(body: str, length: int = 100) -> str:
    text = body.strip()
    if len(text) > length:
        return text[:length] + "..."
    return text
