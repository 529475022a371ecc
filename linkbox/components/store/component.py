"""
Store component - Mutation entry points for the linking-process graph.

Each run_* function applies one mutation to a snapshot and wraps the result
in a StoreMutationOutput. Rejections never raise: the output carries the
input snapshot, the reasons, and success=False.

Shell Layer - converts mutator results to outputs.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from linkbox.domain.entities import Store
from linkbox.domain.integrity import RefIndex

from ._impl import Mutation, StoreMutator
from .models import (
    AddInvestmentsInput,
    AppendMessageInput,
    CreateConversationInput,
    CreateProcessInput,
    FirmReplyInput,
    MoveConversationsInput,
    OpsReplyInput,
    RemoveInvestmentsInput,
    SetInvestmentRefsInput,
    SetInvestmentStatusInput,
    StoreMutationInput,
    StoreMutationOutput,
)


def _to_output(result: Mutation) -> StoreMutationOutput:
    return StoreMutationOutput(
        store=result.store,
        errors=tuple(result.errors),
        success=result.success,
        created_id=result.created_id if result.success else None,
    )


# --- Shell Layer Functions ---


def run_create_process(
    input_data: CreateProcessInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    """Open a new process; created_id is the new process id."""
    return _to_output(mutator.create_process(store, input_data, index))


def run_create_conversation(
    input_data: CreateConversationInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    """Start a conversation; created_id is the new conversation id."""
    return _to_output(mutator.create_conversation(store, input_data, index))


def run_append_message(
    input_data: AppendMessageInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    """Append a prepared message; created_id is the message id."""
    return _to_output(mutator.append_message(store, input_data))


def run_ops_reply(
    input_data: OpsReplyInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.send_ops_reply(store, input_data))


def run_firm_reply(
    input_data: FirmReplyInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.send_firm_reply(store, input_data))


def run_set_investment_refs(
    input_data: SetInvestmentRefsInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.set_investment_refs(store, input_data, index))


def run_set_investment_status(
    input_data: SetInvestmentStatusInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.set_investment_status(store, input_data, index))


def run_move_conversations(
    input_data: MoveConversationsInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.move_conversations(store, input_data, index))


def run_add_investments(
    input_data: AddInvestmentsInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.add_investments_to_process(store, input_data, index))


def run_remove_investments(
    input_data: RemoveInvestmentsInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    return _to_output(mutator.remove_investments_from_process(store, input_data, index))


_HANDLERS: dict[type, Callable[..., StoreMutationOutput]] = {
    CreateProcessInput: run_create_process,
    CreateConversationInput: run_create_conversation,
    AppendMessageInput: run_append_message,
    OpsReplyInput: run_ops_reply,
    FirmReplyInput: run_firm_reply,
    SetInvestmentRefsInput: run_set_investment_refs,
    SetInvestmentStatusInput: run_set_investment_status,
    MoveConversationsInput: run_move_conversations,
    AddInvestmentsInput: run_add_investments,
    RemoveInvestmentsInput: run_remove_investments,
}


def run(
    input_data: StoreMutationInput,
    mutator: StoreMutator,
    store: Store,
    index: RefIndex | None = None,
) -> StoreMutationOutput:
    """
    Dispatch any store mutation input to its entry point.

    Raises TypeError for an object that is not a mutation input.
    """
    handler: Any = _HANDLERS.get(type(input_data))
    if handler is None:
        raise TypeError(f"Unsupported mutation input: {type(input_data).__name__}")
    return handler(input_data, mutator, store, index)
