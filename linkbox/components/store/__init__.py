"""
Store component - Mutation and derivation engine for processes,
conversations and investments.
"""

from linkbox.domain.state import derive_state, message_transition, rederive_states

from ._impl import Mutation, StoreMutator
from .component import (
    run,
    run_add_investments,
    run_append_message,
    run_create_conversation,
    run_create_process,
    run_firm_reply,
    run_move_conversations,
    run_ops_reply,
    run_remove_investments,
    run_set_investment_refs,
    run_set_investment_status,
)
from .models import (
    DEFAULT_CONFIG,
    AddInvestmentsInput,
    AppendMessageInput,
    CreateConversationInput,
    CreateProcessInput,
    EmailDraft,
    FirmReplyInput,
    MoveConversationsInput,
    MutationConfig,
    OpsReplyInput,
    RemoveInvestmentsInput,
    SetInvestmentRefsInput,
    SetInvestmentStatusInput,
    StoreMutationInput,
    StoreMutationOutput,
    StoreValidationError,
)

__all__ = [
    # Component entry points
    "run",
    "run_create_process",
    "run_create_conversation",
    "run_append_message",
    "run_ops_reply",
    "run_firm_reply",
    "run_set_investment_refs",
    "run_set_investment_status",
    "run_move_conversations",
    "run_add_investments",
    "run_remove_investments",
    # Derivation
    "derive_state",
    "message_transition",
    "rederive_states",
    # Models
    "CreateProcessInput",
    "CreateConversationInput",
    "AppendMessageInput",
    "OpsReplyInput",
    "FirmReplyInput",
    "SetInvestmentRefsInput",
    "SetInvestmentStatusInput",
    "MoveConversationsInput",
    "AddInvestmentsInput",
    "RemoveInvestmentsInput",
    "EmailDraft",
    "StoreMutationInput",
    "StoreMutationOutput",
    "StoreValidationError",
    "MutationConfig",
    "DEFAULT_CONFIG",
    # Service
    "StoreMutator",
    "Mutation",
]
