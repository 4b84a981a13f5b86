from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import requests
from pylon_fakes import SCENARIO_ISSUES, DummyResponse, DummySession, issues_page

from rooster.pylon_rest import (
    MalformedResponseError,
    PylonRestClient,
    SourceFetchError,
    TruncatedResultsError,
)

EST = timezone(timedelta(hours=-5))
NOW = datetime(2024, 1, 10, 15, 30, tzinfo=EST)


def _client(session: DummySession, **kw) -> PylonRestClient:
    return PylonRestClient(token="tkn", session=session, clock=lambda: NOW, tz=EST, **kw)  # type: ignore[arg-type]


def test_fetch_issues_sends_one_authenticated_windowed_request():
    session = DummySession([issues_page(SCENARIO_ISSUES)])
    client = _client(session)

    issues = client.fetch_issues(1)

    assert [i.number for i in issues] == [1, 2, 3]
    assert len(session.request_log) == 1
    method, url, meta = session.request_log[0]
    assert method == "GET"
    assert url == "https://api.usepylon.com/issues"
    assert meta["headers"]["Authorization"] == "Bearer tkn"
    assert meta["headers"]["Content-Type"] == "application/json"
    assert meta["params"] == {
        "start_time": "2024-01-10T05:00:00.000Z",
        "end_time": "2024-01-11T05:00:00.000Z",
    }
    assert meta["timeout"] == 30.0


def test_multi_day_window_moves_start_back():
    session = DummySession([issues_page([])])
    _client(session).fetch_issues(3)

    params = session.request_log[0][2]["params"]
    assert params["start_time"] == "2024-01-08T05:00:00.000Z"
    assert params["end_time"] == "2024-01-11T05:00:00.000Z"


def test_custom_base_url_is_normalised():
    session = DummySession([issues_page([])])
    _client(session, base_url="https://pylon.internal.test/").fetch_issues(1)

    assert session.request_log[0][1] == "https://pylon.internal.test/issues"


def test_server_error_raises_source_fetch_error_without_retry():
    session = DummySession(
        [DummyResponse(500, "server error", reason="Internal Server Error"), issues_page([])]
    )

    with pytest.raises(SourceFetchError) as excinfo:
        _client(session).fetch_issues(1)

    err = excinfo.value
    assert err.status == 500
    assert err.reason == "Internal Server Error"
    assert err.response_text == "server error"
    assert "server error" in str(err)
    assert len(session.request_log) == 1


def test_transport_failure_is_wrapped():
    session = DummySession([requests.ConnectionError("connection refused")])

    with pytest.raises(SourceFetchError) as excinfo:
        _client(session).fetch_issues(1)

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.parametrize(
    "payload",
    [
        {"request_id": "req-1"},
        {"data": {"0": {}}},
        ["not", "an", "object"],
        {"data": ["not-an-issue"]},
        "<html>gateway</html>",
    ],
)
def test_malformed_bodies_are_fatal(payload):
    session = DummySession([DummyResponse(200, payload)])

    with pytest.raises(MalformedResponseError):
        _client(session).fetch_issues(1)


def test_pagination_cursor_fails_loudly_by_default():
    session = DummySession([issues_page(SCENARIO_ISSUES, cursor="next-page")])

    with pytest.raises(TruncatedResultsError) as excinfo:
        _client(session).fetch_issues(1)

    assert excinfo.value.cursor == "next-page"
    assert excinfo.value.fetched == 3


def test_pagination_cursor_can_be_tolerated():
    session = DummySession([issues_page(SCENARIO_ISSUES, cursor="next-page")])

    issues = _client(session, fail_on_pagination=False).fetch_issues(1)

    assert [i.number for i in issues] == [1, 2, 3]


def test_empty_cursor_means_last_page():
    session = DummySession([issues_page(SCENARIO_ISSUES, cursor="")])

    assert len(_client(session).fetch_issues(1)) == 3


def test_records_missing_fields_are_kept():
    session = DummySession([issues_page([{"id": "x", "number": 9}])])

    (issue,) = _client(session).fetch_issues(1)

    assert issue.state == ""
    assert issue.first_response_time is None
