"""
Sorting component unit tests.

Tests for investment column sorting, the default order, conversation
priority and the header-click sort cycle.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from linkbox.components.sorting import (
    SortState,
    next_sort_state,
    sort_conversations_by_priority,
    sort_investments,
    sort_investments_by_default,
    sort_messages_newest_first,
)
from linkbox.domain.entities import Convo, EmailAddress, EmailMsg, Investment

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def make_investment(inv_id: int, status=None, entity="Entity", fund="Fund", days=0) -> Investment:
    return Investment(
        id=inv_id,
        client_id="c1",
        investing_entity=entity,
        fund_name=fund,
        status=status,
        last_activity_at=T0 + timedelta(days=days),
    )


def make_convo(convo_id: str, state: str, days: int) -> Convo:
    return Convo(
        id=convo_id,
        process_id=1,
        alias_email="ops@example.com",
        subject="s",
        state=state,
        last_activity_at=T0 + timedelta(days=days),
    )


@pytest.fixture
def investments() -> list[Investment]:
    return [
        make_investment(5, None, "delta", "Zeta", days=3),
        make_investment(3, "archived", "Alpha", "beta", days=1),
        make_investment(4, "linked", "charlie", "Alpha", days=4),
        make_investment(1, "in_progress", "Bravo", "gamma", days=2),
        make_investment(2, "linked", "echo", "delta", days=0),
    ]


class TestSortInvestments:
    """Test column sorting."""

    def test_default_order(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments)
        assert [inv.id for inv in ordered] == [1, 2, 4, 3, 5]

    def test_default_order_matches_helper(self, investments: list[Investment]) -> None:
        assert sort_investments(investments) == sort_investments_by_default(investments)

    def test_sort_by_id_desc(self, investments: list[Investment]) -> None:
        assert [inv.id for inv in sort_investments(investments, "id", "desc")] == [5, 4, 3, 2, 1]

    def test_sort_by_entity_is_case_insensitive(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments, "entity", "asc")
        assert [inv.investing_entity for inv in ordered] == [
            "Alpha",
            "Bravo",
            "charlie",
            "delta",
            "echo",
        ]

    def test_sort_by_fund(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments, "fund", "asc")
        assert [inv.id for inv in ordered] == [4, 3, 2, 1, 5]

    def test_sort_by_status_groups(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments, "status", "asc")
        assert [inv.status for inv in ordered] == [
            "in_progress",
            "linked",
            "linked",
            "archived",
            None,
        ]

    def test_sort_by_last_activity(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments, "last_activity", "desc")
        assert [inv.id for inv in ordered] == [4, 5, 1, 3, 2]

    def test_ties_keep_input_order(self) -> None:
        items = [make_investment(9, "linked"), make_investment(7, "linked")]
        assert [inv.id for inv in sort_investments(items, "status", "asc")] == [9, 7]

    def test_unknown_column_keeps_order(self, investments: list[Investment]) -> None:
        ordered = sort_investments(investments, "size", "asc")  # type: ignore[arg-type]
        assert ordered == investments

    def test_input_not_reordered(self, investments: list[Investment]) -> None:
        before = list(investments)
        sort_investments(investments, "id", "asc")
        assert investments == before


class TestNextSortState:
    """Test the header-click cycle."""

    def test_new_column_starts_ascending(self) -> None:
        assert next_sort_state(SortState(), "fund") == SortState("fund", "asc")

    def test_cycle_asc_desc_cleared(self) -> None:
        state = next_sort_state(SortState(), "id")
        state = next_sort_state(state, "id")
        assert state == SortState("id", "desc")
        state = next_sort_state(state, "id")
        assert state == SortState()
        assert not state.active

    def test_switching_column_restarts(self) -> None:
        assert next_sort_state(SortState("id", "desc"), "entity") == SortState("entity", "asc")


class TestConversationOrder:
    def test_state_priority_then_recency(self) -> None:
        convos = [
            make_convo("a", "CLOSED", 9),
            make_convo("b", "PENDING_FUND", 1),
            make_convo("c", "PENDING_ARCH", 0),
            make_convo("d", "PENDING_FUND", 5),
            make_convo("e", "NO_RESPONSE", 10),
        ]
        assert [c.id for c in sort_conversations_by_priority(convos)] == ["c", "d", "b", "a", "e"]


def test_messages_newest_first() -> None:
    def msg(msg_id: str, days: int) -> EmailMsg:
        return EmailMsg(
            id=msg_id,
            ts=T0 + timedelta(days=days),
            sender=EmailAddress(address="a@b.com"),
            from_role="OPS",
            to=[EmailAddress(address="c@d.com")],
            direction="OUT",
            body="x",
        )

    ordered = sort_messages_newest_first([msg("m1", 0), msg("m2", 2), msg("m3", 1)])
    assert [m.id for m in ordered] == ["m2", "m3", "m1"]
