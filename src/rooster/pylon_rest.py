from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

import requests

from .logging import get_logger
from .models import Issue
from .window import IssueWindow, compute_window

DEFAULT_API_URL = "https://api.usepylon.com"
USER_AGENT = "rooster-rest/0.1.0"
DEFAULT_TIMEOUT = 30.0


class IssueSourceError(RuntimeError):
    """Base class for failures while reading issues from Pylon."""


class SourceFetchError(IssueSourceError):
    """Raised when the issues request fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        reason: str | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.response_text = response_text


class MalformedResponseError(IssueSourceError):
    """Raised when the response body does not carry a ``data`` list of issues."""


class TruncatedResultsError(IssueSourceError):
    """Raised when Pylon reports a further page that would be silently dropped."""

    def __init__(self, message: str, *, cursor: str, fetched: int):
        super().__init__(message)
        self.cursor = cursor
        self.fetched = fetched


def _is_success(status: int) -> bool:
    return 200 <= status < 300


@dataclass
class PylonRestClient:
    """Single-request reader for the Pylon ``/issues`` endpoint."""

    token: str
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    fail_on_pagination: bool = True
    tz: tzinfo | None = None
    session: requests.Session | None = None
    clock: Callable[[], datetime] | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    @property
    def issues_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/issues"

    def window_for(self, days: int) -> IssueWindow:
        now = self.clock() if self.clock is not None else None
        return compute_window(days, now=now, tz=self.tz)

    def fetch_issues(self, days: int) -> list[Issue]:
        return self.fetch_window(self.window_for(days))

    def fetch_window(self, window: IssueWindow) -> list[Issue]:
        logger = get_logger()
        params = window.as_query_params()
        with logger.timed_operation("fetch_issues", days=window.days, **params):
            body = self._get(self.issues_url, params)
            issues = self._parse_issues(body)
        logger.debug("fetched issues", count=len(issues), days=window.days)
        return issues

    # ---- HTTP ---------------------------------------------------------
    def _get(self, url: str, params: dict[str, str]) -> Any:
        try:
            response = self._session.request(
                "GET",
                url,
                params=params,
                headers=self._session.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SourceFetchError(f"Pylon API GET {url} failed: {exc}") from exc
        if not _is_success(response.status_code):
            reason = getattr(response, "reason", None) or ""
            status_line = f"{response.status_code} {reason}".strip()
            raise SourceFetchError(
                f"Pylon API error: {status_line} - {response.text}",
                status=response.status_code,
                reason=reason,
                response_text=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Pylon API returned a non-JSON body: {exc}") from exc

    # ---- Parsing ------------------------------------------------------
    def _parse_issues(self, body: Any) -> list[Issue]:
        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"Pylon API response must be an object, got {type(body).__name__}"
            )
        data = body.get("data")
        if not isinstance(data, list):
            raise MalformedResponseError("Pylon API response is missing a 'data' list")
        issues: list[Issue] = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise MalformedResponseError(
                    f"Pylon API issue at index {index} is {type(entry).__name__}, expected object"
                )
            issues.append(Issue.from_dict(entry))
        self._check_pagination(body, len(issues))
        return issues

    def _check_pagination(self, body: dict[str, Any], fetched: int) -> None:
        pagination = body.get("pagination")
        cursor = pagination.get("cursor") if isinstance(pagination, dict) else None
        if not cursor:
            return
        message = (
            f"Pylon API returned {fetched} issues and a further page (cursor {cursor}); "
            "results for this window are incomplete"
        )
        if self.fail_on_pagination:
            raise TruncatedResultsError(message, cursor=str(cursor), fetched=fetched)
        get_logger().warning(message, cursor=str(cursor), fetched=fetched)


__all__ = [
    "IssueSourceError",
    "SourceFetchError",
    "MalformedResponseError",
    "TruncatedResultsError",
    "PylonRestClient",
]
