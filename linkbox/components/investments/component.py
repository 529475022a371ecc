"""
Investments component - Counting, filtering and membership queries.

Process membership is derived: the investments of a process are the union
of the references held by its conversations. Dangling references (ids with
no matching investment or conversation) are skipped.
"""

from __future__ import annotations

from collections.abc import Iterable

from linkbox.domain.entities import Investment, InvestmentStatus, Store

from .models import InvestmentCounts


def calculate_investment_counts(investments: Iterable[Investment]) -> InvestmentCounts:
    """Count investments per status in a single pass."""
    total = linked = in_progress = archived = 0
    for inv in investments:
        total += 1
        if inv.status == "linked":
            linked += 1
        elif inv.status == "in_progress":
            in_progress += 1
        elif inv.status == "archived":
            archived += 1

    return InvestmentCounts(
        total=total,
        linked=linked,
        in_progress=in_progress,
        archived=archived,
    )


def filter_investments_by_status(
    investments: list[Investment],
    status: InvestmentStatus | None,
) -> list[Investment]:
    """Exact-match status filter; no filter returns the input unchanged."""
    if status is None:
        return investments
    return [inv for inv in investments if inv.status == status]


def _process_investment_ids(store: Store, process_id: int) -> dict[int, None]:
    # Ordered set, first appearance wins.
    ids: dict[int, None] = {}
    process = store.processes.get(process_id)
    if process is None:
        return ids

    for convo_id in process.convo_ids:
        convo = store.convos.get(convo_id)
        if convo is not None:
            ids.update(dict.fromkeys(convo.investment_refs))
    return ids


def get_process_investments(store: Store, process_id: int) -> list[Investment]:
    """Investments referenced by any conversation of the process."""
    return [
        store.investments[inv_id]
        for inv_id in _process_investment_ids(store, process_id)
        if inv_id in store.investments
    ]


def get_conversation_investments(
    process_investments: list[Investment],
    convo_id: str | None,
    store: Store,
) -> list[Investment]:
    """Narrow a process's investments to one conversation, when one is selected."""
    if not convo_id:
        return process_investments

    convo = store.convos.get(convo_id)
    if convo is None:
        return process_investments

    refs = set(convo.investment_refs)
    return [inv for inv in process_investments if inv.id in refs]


def get_unassigned_investments(store: Store, client_id: str) -> list[Investment]:
    """The client's investments that no conversation references."""
    assigned = {inv_id for convo in store.convos.values() for inv_id in convo.investment_refs}
    return [
        inv
        for inv in store.investments.values()
        if inv.client_id == client_id and inv.id not in assigned
    ]


def get_investments_not_in_process(
    store: Store,
    process_id: int,
    client_id: str,
) -> list[Investment]:
    """
    The client's investments outside this process: unassigned ones plus
    those referenced only by other processes' conversations.
    """
    in_process = _process_investment_ids(store, process_id)
    return [
        inv
        for inv in store.investments.values()
        if inv.client_id == client_id and inv.id not in in_process
    ]


def get_process_counts(store: Store, process_id: int) -> InvestmentCounts:
    return calculate_investment_counts(get_process_investments(store, process_id))
