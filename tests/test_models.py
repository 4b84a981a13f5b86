from __future__ import annotations

from rooster.models import OPEN_STATES, Issue


def test_from_dict_keeps_passthrough_metadata():
    payload = {
        "id": "iss_1",
        "number": 42,
        "title": "Export fails",
        "state": "waiting_on_you",
        "created_at": "2024-01-10T12:00:00Z",
        "first_response_time": "2024-01-10T12:05:00Z",
        "link": "https://app.usepylon.com/issues/42",
        "account": {"id": "acc_1", "name": "Acme"},
        "requester": {"id": "req_1", "email": "ops@acme.test"},
        "slack": {"channel_id": "C1", "message_ts": "1.2", "workspace_id": "W1"},
    }

    issue = Issue.from_dict(payload)

    assert issue.number == 42
    assert issue.is_open
    assert issue.has_first_response
    assert issue.account == {"id": "acc_1", "name": "Acme"}
    assert issue.slack is not None and issue.slack["channel_id"] == "C1"
    assert issue.raw == payload
    assert issue.to_dict()["link"] == payload["link"]


def test_missing_fields_are_defaulted():
    issue = Issue.from_dict({"id": "x"})

    assert issue.state == ""
    assert issue.title == ""
    assert issue.number == 0
    assert issue.first_response_time is None
    assert not issue.has_first_response
    assert not issue.is_open
    assert issue.display_title == "(no title)"


def test_open_states_are_the_four_active_states():
    assert set(OPEN_STATES) == {"new", "waiting_on_you", "waiting_on_customer", "on_hold"}
    assert not Issue.from_dict({"state": "closed"}).is_open
