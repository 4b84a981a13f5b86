"""Rooster - find Pylon support issues that nobody has answered yet.

High-level public API:

from rooster import PylonRestClient, UnrespondedIssueClassifier

client = PylonRestClient(token="...")
classifier = UnrespondedIssueClassifier(client)
report = classifier.check_unresponded(days=1)
for issue in report.issues:
    print(issue.number, issue.display_title)
print(report.diagnostics.to_dict())

Chat delivery (Slack commands, cron) lives with the caller; the ``rooster``
CLI is a thin front end over the same calls.
"""

from __future__ import annotations

from .classifier import (
    UnrespondedDiagnostics,
    UnrespondedIssueClassifier,
    UnrespondedReport,
    classify_unresponded,
    filter_open,
)
from .config import ConfigError, RoosterConfig, load_config
from .models import OPEN_STATES, Issue
from .pylon_rest import (
    IssueSourceError,
    MalformedResponseError,
    PylonRestClient,
    SourceFetchError,
    TruncatedResultsError,
)
from .window import IssueWindow, compute_window

# Version constant (keep in sync with pyproject.toml)
__version__ = "0.1.0"

__all__ = [
    "Issue",
    "OPEN_STATES",
    "IssueWindow",
    "compute_window",
    "PylonRestClient",
    "IssueSourceError",
    "SourceFetchError",
    "MalformedResponseError",
    "TruncatedResultsError",
    "UnrespondedIssueClassifier",
    "UnrespondedReport",
    "UnrespondedDiagnostics",
    "classify_unresponded",
    "filter_open",
    "RoosterConfig",
    "ConfigError",
    "load_config",
    "__version__",
]
