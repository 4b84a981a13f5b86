from __future__ import annotations

from datetime import datetime, timezone

from pylon_fakes import SCENARIO_ISSUES

from rooster.classifier import classify_unresponded, filter_open
from rooster.models import Issue
from rooster.summary import (
    describe_window,
    format_diagnostics,
    format_open,
    format_unresponded,
    report_to_dict,
)
from rooster.window import compute_window

ISSUES = [Issue.from_dict(r) for r in SCENARIO_ISSUES]


def test_describe_window():
    assert describe_window(1) == "today"
    assert describe_window(4) == "the last 4 days"


def test_format_unresponded_lists_each_issue():
    lines = format_unresponded(classify_unresponded(ISSUES), 1)

    assert lines == ["1 unresponded issue from today:", "  • #1: Login broken"]


def test_format_unresponded_when_nothing_found():
    assert format_unresponded(classify_unresponded([]), 3) == [
        "no unresponded issues found from the last 3 days"
    ]


def test_format_open_includes_state_and_link():
    linked = Issue.from_dict(
        {"number": 8, "title": "", "state": "on_hold", "link": "https://app.usepylon.com/issues/8"}
    )

    lines = format_open(filter_open([*ISSUES, linked]), 2)

    assert lines[0] == "4 open issues from the last 2 days:"
    assert "  • #3: Billing [waiting_on_you]" in lines
    assert lines[-1] == "  • #8: (no title) [on_hold] <https://app.usepylon.com/issues/8>"


def test_format_diagnostics_is_a_complete_audit_trail():
    lines = format_diagnostics(classify_unresponded(ISSUES).diagnostics)
    text = "\n".join(lines)

    assert "[audit] total fetched: 3" in text
    assert "[audit] state 'new': 2" in text
    assert "#2: Thanks! (first_response_time: 2024-01-01T10:00:00Z)" in text
    assert lines[-1] == "  - #1: Login broken"


def test_report_to_dict_carries_window_and_diagnostics():
    now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
    window = compute_window(1, now=now, tz=timezone.utc)

    doc = report_to_dict(classify_unresponded(ISSUES), window)

    assert doc["found"] is True
    assert [i["number"] for i in doc["issues"]] == [1]
    assert doc["diagnostics"]["excluded_count"] == 1
    assert doc["window"] == {
        "days": 1,
        "start": "2024-01-10T00:00:00.000Z",
        "end": "2024-01-11T00:00:00.000Z",
    }
