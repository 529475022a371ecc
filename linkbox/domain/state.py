from collections.abc import Iterable

from linkbox.domain.entities import Convo, ConvoState, EmailMsg, Store

CLOSED_STATUSES = frozenset({"linked", "archived"})

# A closed conversation that regains an open investment waits on the fund.
REOPEN_STATE: ConvoState = "PENDING_FUND"


def derive_state(convo: Convo, store: Store) -> ConvoState:
    """
    Compute a conversation's state from the statuses of its investments.

    Returns the current state whenever there is nothing to derive from:
    no references, or only references that no longer resolve.
    """
    if not convo.investment_refs:
        return convo.state

    resolved = [
        store.investments[inv_id]
        for inv_id in convo.investment_refs
        if inv_id in store.investments
    ]
    if not resolved:
        return convo.state

    if all(inv.status in CLOSED_STATUSES for inv in resolved):
        return "CLOSED"

    if convo.state == "CLOSED":
        return REOPEN_STATE

    return convo.state


def message_transition(
    current: ConvoState,
    message: EmailMsg,
    *,
    override_closed: bool = True,
) -> ConvoState:
    """
    State after appending a message.

    Outbound messages wait on the fund, inbound replies from anyone other
    than the operations side wait on us. With override_closed=False a
    CLOSED conversation stays closed until an investment reopens it.
    """
    if current == "CLOSED" and not override_closed:
        return current

    if message.direction == "OUT":
        return "PENDING_FUND"

    if message.from_role != "OPS":
        return "PENDING_ARCH"

    return current


def reopened_by_message(convo: Convo, store: Store) -> bool:
    """
    True when the derivation closes the conversation but its latest
    state-changing message moved it out of CLOSED.

    Such a conversation stays open until the next status change re-derives it.
    """
    if convo.state == "CLOSED" or derive_state(convo, store) != "CLOSED":
        return False
    for message in reversed(convo.messages):
        reopened = message_transition("CLOSED", message)
        if reopened != "CLOSED":
            return reopened == convo.state
    return False


def rederive_states(store: Store, convo_ids: Iterable[str]) -> Store:
    """
    Re-run derive_state for the named conversations.

    Only conversations whose state actually changes are replaced; when none
    change the same snapshot is returned.
    """
    changed: dict[str, Convo] = {}
    for convo_id in dict.fromkeys(convo_ids):
        convo = store.convos.get(convo_id)
        if convo is None:
            continue
        new_state = derive_state(convo, store)
        if new_state != convo.state:
            changed[convo_id] = convo.model_copy(update={"state": new_state})

    if not changed:
        return store

    return store.replace(convos={**store.convos, **changed})
