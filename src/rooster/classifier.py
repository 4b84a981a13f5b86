"""Open / unresponded issue classification.

Decision rules:

* an issue is *open* when its state is one of ``OPEN_STATES``;
* an issue is *unresponded* only when its state is ``new`` **and** it has no
  ``first_response_time``. A ``new`` issue that already has a first response
  is a customer follow-up on a thread an agent started (the follow-up resets
  the state to ``new`` but keeps the response time); it is excluded.

The unresponded path also returns a diagnostic record so a caller can show
or log exactly why each ``new`` issue was kept or dropped without
re-querying Pylon.

Diagnostic structure (``UnrespondedDiagnostics.to_dict``)::

    {
        "total_fetched": int,
        "new_state_count": int,
        "included_count": int,
        "excluded_count": int,
        "excluded": [{"number", "title", "first_response_time", "reason"}],
        "included": [{"number", "title", "first_response_time", "reason"}],
    }
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from .logging import get_logger
from .models import NEW_STATE, Issue

REASON_NO_FIRST_RESPONSE = "no_first_response"
REASON_CUSTOMER_FOLLOW_UP = "customer_follow_up"


class IssueSource(Protocol):
    def fetch_issues(self, days: int) -> list[Issue]: ...


@dataclass(frozen=True)
class IssueDecision:
    number: int
    title: str
    reason: str
    first_response_time: str | None = None

    @classmethod
    def for_issue(cls, issue: Issue, reason: str) -> IssueDecision:
        return cls(
            number=issue.number,
            title=issue.title,
            reason=reason,
            first_response_time=issue.first_response_time,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "first_response_time": self.first_response_time,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class UnrespondedDiagnostics:
    total_fetched: int = 0
    new_state_count: int = 0
    included: tuple[IssueDecision, ...] = ()
    excluded: tuple[IssueDecision, ...] = ()

    @property
    def included_count(self) -> int:
        return len(self.included)

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_fetched": self.total_fetched,
            "new_state_count": self.new_state_count,
            "included_count": self.included_count,
            "excluded_count": self.excluded_count,
            "excluded": [d.to_dict() for d in self.excluded],
            "included": [d.to_dict() for d in self.included],
        }


@dataclass(frozen=True)
class UnrespondedReport:
    issues: list[Issue] = field(default_factory=list)
    diagnostics: UnrespondedDiagnostics = field(default_factory=UnrespondedDiagnostics)

    @property
    def found(self) -> bool:
        return bool(self.issues)


def filter_open(issues: Iterable[Issue]) -> list[Issue]:
    return [issue for issue in issues if issue.is_open]


def classify_unresponded(issues: Iterable[Issue]) -> UnrespondedReport:
    fetched = list(issues)
    new_state = [issue for issue in fetched if issue.state == NEW_STATE]
    unresponded = [issue for issue in new_state if not issue.has_first_response]
    follow_ups = [issue for issue in new_state if issue.has_first_response]
    diagnostics = UnrespondedDiagnostics(
        total_fetched=len(fetched),
        new_state_count=len(new_state),
        included=tuple(IssueDecision.for_issue(i, REASON_NO_FIRST_RESPONSE) for i in unresponded),
        excluded=tuple(IssueDecision.for_issue(i, REASON_CUSTOMER_FOLLOW_UP) for i in follow_ups),
    )
    return UnrespondedReport(issues=unresponded, diagnostics=diagnostics)


class UnrespondedIssueClassifier:
    """Fetch-then-filter front end over an issue source.

    Every call performs its own fetch; nothing is cached between calls.
    """

    def __init__(self, source: IssueSource):
        self.source = source

    def get_open_issues(self, days: int) -> list[Issue]:
        return filter_open(self.source.fetch_issues(days))

    def check_unresponded(self, days: int) -> UnrespondedReport:
        report = classify_unresponded(self.source.fetch_issues(days))
        diag = report.diagnostics
        get_logger().debug(
            "classified unresponded issues",
            days=days,
            total_fetched=diag.total_fetched,
            new_state_count=diag.new_state_count,
            included_count=diag.included_count,
            excluded_count=diag.excluded_count,
        )
        return report

    def get_unresponded_issues(self, days: int) -> list[Issue]:
        return self.check_unresponded(days).issues


__all__ = [
    "IssueSource",
    "IssueDecision",
    "UnrespondedDiagnostics",
    "UnrespondedReport",
    "UnrespondedIssueClassifier",
    "filter_open",
    "classify_unresponded",
    "REASON_NO_FIRST_RESPONSE",
    "REASON_CUSTOMER_FOLLOW_UP",
]
