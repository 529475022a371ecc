"""
Command line tests, run against a temporary data directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from linkbox.app_shell.cli import main


@pytest.fixture
def cli(tmp_path: Path, rules_path: Path, capsys: pytest.CaptureFixture):
    """Run one CLI command; returns (exit_code, stdout, stderr)."""

    def invoke(*args: str) -> tuple[int, str, str]:
        code = 0
        try:
            main(["--rules", str(rules_path), "--data-dir", str(tmp_path), *args])
        except SystemExit as e:
            code = int(e.code or 0)
        out, err = capsys.readouterr()
        return code, out, err

    return invoke


def test_processes_lists_seed(cli) -> None:
    code, out, _ = cli("processes")
    assert code == 0
    assert "Landmark Equity Partners" in out
    assert "Blackstone GSO" in out


def test_show_orders_conversations(cli) -> None:
    code, out, _ = cli("show", "2")
    assert code == 0
    assert out.index("cv_2_m2") < out.index("cv_2_m1")
    assert "[CLOSED]" in out


def test_show_filters_investments(cli) -> None:
    _, out, _ = cli("show", "1", "--convo", "cv_1_m2", "--status", "linked")
    investments = out.split("Investments:")[1]
    assert "282706" in investments
    assert "282707" not in investments


def test_show_unknown_process(cli) -> None:
    code, _, _ = cli("show", "42")
    assert code == 1


def test_new_process_is_persisted(cli) -> None:
    code, out, _ = cli(
        "new-process",
        "--fund",
        "Apollo",
        "--client",
        "Acme",
        "--to",
        "admin@apollo.com",
        "--body",
        "Hello",
        "--investment",
        "290000",
    )
    assert code == 0
    assert out.strip() == "OK: 3"

    _, out, _ = cli("processes")
    assert "Apollo" in out


def test_status_and_check(cli) -> None:
    code, _, _ = cli("status", "283000", "in_progress")
    assert code == 0

    _, out, _ = cli("show", "2")
    assert "[PENDING_FUND]" in out

    code, out, _ = cli("check")
    assert code == 0
    assert "Store is consistent." in out


def test_rejection_goes_to_stderr(cli) -> None:
    code, _, err = cli("status", "290000", "linked")
    assert code == 1
    assert "investment_unassigned" in err


def test_move_and_reset(cli) -> None:
    code, _, _ = cli("move", "--from", "1", "--to", "2", "cv_1_m2")
    assert code == 0

    _, out, _ = cli("show", "2")
    assert "cv_1_m2" in out

    code, out, _ = cli("reset")
    assert code == 0
    assert "2 processes" in out

    _, out, _ = cli("show", "2")
    assert "cv_1_m2" not in out


def test_missing_rules_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--rules", str(tmp_path / "none.yaml"), "processes"])
    assert exc.value.code == 1


def test_reply_on_closed_conversation_passes_check(cli) -> None:
    code, _, _ = cli("reply", "cv_2_m1", "Following up")
    assert code == 0

    code, out, _ = cli("check")
    assert code == 0
    assert "WARN [state_reopened]" in out
    assert "FAIL" not in out
    assert "Store is consistent." in out
