"""Human-readable and JSON renderings of check results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from .classifier import UnrespondedDiagnostics, UnrespondedReport
from .models import Issue
from .window import IssueWindow, to_iso8601


def describe_window(days: int) -> str:
    return "today" if days == 1 else f"the last {days} days"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _issue_line(issue: Issue, *, with_state: bool = False) -> str:
    line = f"  • #{issue.number}: {issue.display_title}"
    if with_state:
        line += f" [{issue.state}]"
    if issue.link:
        line += f" <{issue.link}>"
    return line


def format_unresponded(report: UnrespondedReport, days: int) -> list[str]:
    if not report.issues:
        return [f"no unresponded issues found from {describe_window(days)}"]
    lines = [f"{_plural(len(report.issues), 'unresponded issue')} from {describe_window(days)}:"]
    lines.extend(_issue_line(issue) for issue in report.issues)
    return lines


def format_open(issues: Sequence[Issue], days: int) -> list[str]:
    if not issues:
        return [f"no open issues found from {describe_window(days)}"]
    lines = [f"{_plural(len(issues), 'open issue')} from {describe_window(days)}:"]
    lines.extend(_issue_line(issue, with_state=True) for issue in issues)
    return lines


def format_diagnostics(diagnostics: UnrespondedDiagnostics) -> list[str]:
    lines = [
        f"[audit] total fetched: {diagnostics.total_fetched}",
        f"[audit] state 'new': {diagnostics.new_state_count}",
        f"[audit] truly unresponded (no first_response_time): {diagnostics.included_count}",
    ]
    if diagnostics.excluded:
        lines.append(
            f"[audit] excluded {_plural(diagnostics.excluded_count, 'issue')} "
            "(customer replies to agent-initiated threads):"
        )
        for d in diagnostics.excluded:
            lines.append(
                f"  - #{d.number}: {d.title or '(no title)'} "
                f"(first_response_time: {d.first_response_time})"
            )
    lines.append("[audit] included issues:")
    for d in diagnostics.included:
        lines.append(f"  - #{d.number}: {d.title or '(no title)'}")
    return lines


def window_to_dict(window: IssueWindow) -> dict[str, Any]:
    return {"days": window.days, "start": to_iso8601(window.start), "end": to_iso8601(window.end)}


def issues_to_dicts(issues: Iterable[Issue]) -> list[dict[str, Any]]:
    return [issue.to_dict() for issue in issues]


def report_to_dict(report: UnrespondedReport, window: IssueWindow | None = None) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "issues": issues_to_dicts(report.issues),
        "diagnostics": report.diagnostics.to_dict(),
        "found": report.found,
    }
    if window is not None:
        doc["window"] = window_to_dict(window)
    return doc


__all__ = [
    "describe_window",
    "format_unresponded",
    "format_open",
    "format_diagnostics",
    "issues_to_dicts",
    "report_to_dict",
    "window_to_dict",
]
