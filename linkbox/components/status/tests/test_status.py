"""
Status component unit tests.
"""

from __future__ import annotations

import pytest

from linkbox.components.status import (
    UNASSIGNED_PRIORITY,
    StateBadge,
    format_status,
    get_state_badges,
    get_state_priority,
    get_status_priority,
)


class TestStatusPriority:
    @pytest.mark.parametrize(
        "status,expected",
        [("in_progress", 1), ("linked", 2), ("archived", 3), (None, 4), ("", 4), ("bogus", 4)],
    )
    def test_priority(self, status, expected) -> None:
        assert get_status_priority(status) == expected

    def test_unassigned_sorts_last(self) -> None:
        assert UNASSIGNED_PRIORITY > get_status_priority("archived")


class TestStatePriority:
    def test_needs_reply_first(self) -> None:
        ordered = sorted(
            ["NO_RESPONSE", "CLOSED", "PENDING_FUND", "PENDING_ARCH"], key=get_state_priority
        )
        assert ordered == ["PENDING_ARCH", "PENDING_FUND", "CLOSED", "NO_RESPONSE"]

    def test_unknown_state_after_known(self) -> None:
        assert get_state_priority("LOST") > get_state_priority("NO_RESPONSE")  # type: ignore[arg-type]


class TestBadges:
    def test_closed_shows_two_badges(self) -> None:
        assert get_state_badges("CLOSED") == (
            StateBadge("closed", "gray"),
            StateBadge("no response", "gray"),
        )

    def test_pending_arch_is_amber(self) -> None:
        (badge,) = get_state_badges("PENDING_ARCH")
        assert badge.tone == "amber"


def test_format_status() -> None:
    assert format_status("in_progress") == "in progress"
    assert format_status("linked") == "linked"
    assert format_status(None) == "unassigned"
