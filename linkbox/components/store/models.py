"""
Store component - Data models.

Every mutation takes a frozen input and produces a StoreMutationOutput.
A rejected mutation carries the untouched input snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass

from linkbox.domain.entities import ConvoState, EmailMsg, InvestmentStatus, Store

# --- Validation Errors ---


@dataclass(frozen=True)
class StoreValidationError:
    """Reason a mutation was rejected."""

    code: str
    message: str
    field: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class MutationConfig:
    """Mutation engine configuration."""

    ops_display_name: str = "Arch"
    alias_domain: str = "archinvestorservices.com"
    alias_token_length: int = 5
    fallback_firm_email: str = "admin@example.com"
    default_subject: str = "Investor Request for Portal Access"
    preview_length: int = 100

    # Conversation ids are cv_{process_id}_{token}
    id_token_length: int = 8
    message_id_token_length: int = 12

    # Inbound/outbound messages move CLOSED conversations back to pending
    message_overrides_closed: bool = True

    # Reject references to investments of a different client than the process
    enforce_client_affinity: bool = False


DEFAULT_CONFIG = MutationConfig()


# --- Input Models ---


@dataclass(frozen=True)
class EmailDraft:
    """An outbound email as typed by the user."""

    to: str
    subject: str = ""
    body: str = ""
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreateProcessInput:
    """Input for opening a new fund-linking process."""

    fund_name: str
    client_name: str
    initial_email: EmailDraft
    selected_investment_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class CreateConversationInput:
    """Input for starting a new conversation within a process."""

    process_id: int
    email: EmailDraft
    investment_refs: tuple[int, ...] = ()


@dataclass(frozen=True)
class AppendMessageInput:
    """Input for appending a prepared message to a conversation."""

    convo_id: str
    message: EmailMsg
    resulting_state: ConvoState | None = None  # None = apply the message transition


@dataclass(frozen=True)
class OpsReplyInput:
    """Input for replying from the operations alias."""

    convo_id: str
    body: str
    to: str | None = None  # None = the firm address of the thread
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()


@dataclass(frozen=True)
class FirmReplyInput:
    """Input for recording a reply sent as the external firm."""

    convo_id: str
    body: str
    sender: str | None = None  # None = the firm address of the thread


@dataclass(frozen=True)
class SetInvestmentRefsInput:
    """Input for replacing a conversation's investment references."""

    convo_id: str
    investment_refs: tuple[int, ...]


@dataclass(frozen=True)
class SetInvestmentStatusInput:
    """Input for changing an investment's status."""

    investment_id: int
    status: InvestmentStatus


@dataclass(frozen=True)
class MoveConversationsInput:
    """Input for moving conversations between processes."""

    convo_ids: tuple[str, ...]
    from_process_id: int
    to_process_id: int


@dataclass(frozen=True)
class AddInvestmentsInput:
    """Input for adding investments to a process."""

    process_id: int
    investment_ids: tuple[int, ...]
    convo_id: str | None = None  # None = the most recently active conversation


@dataclass(frozen=True)
class RemoveInvestmentsInput:
    """Input for removing investments from every conversation of a process."""

    process_id: int
    investment_ids: tuple[int, ...]


StoreMutationInput = (
    CreateProcessInput
    | CreateConversationInput
    | AppendMessageInput
    | OpsReplyInput
    | FirmReplyInput
    | SetInvestmentRefsInput
    | SetInvestmentStatusInput
    | MoveConversationsInput
    | AddInvestmentsInput
    | RemoveInvestmentsInput
)


# --- Output Models ---


@dataclass(frozen=True)
class StoreMutationOutput:
    """Output from a store mutation."""

    store: Store
    errors: tuple[StoreValidationError, ...]
    success: bool
    created_id: str | int | None = None
