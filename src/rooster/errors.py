"""Error taxonomy & redaction helpers.

Public API:
- classify_error(exc) -> ErrorInfo
- redact(text, secrets=()) -> str

The CLI uses these to turn a failed check into a one-line, secret-free
report and an exit code; the library itself raises plain exceptions.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import requests

from .config import ConfigError
from .pylon_rest import (
    MalformedResponseError,
    SourceFetchError,
    TruncatedResultsError,
)

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]{8,}"),
    re.compile(r"(?i)(api[_-]?token['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9._~+/=-]{8,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"
_AUTH_STATUSES = frozenset({401, 403})
_TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str, secrets: Iterable[str] = ()) -> str:
    """Mask bearer tokens and any explicitly known secret values."""
    if not text:
        return text
    redacted = text
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, _REDACTION_PLACEHOLDER)
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
    return redacted


def _classify_fetch_error(exc: SourceFetchError, msg: str) -> ErrorInfo:
    name = exc.__class__.__name__
    details = {"status": exc.status, "reason": exc.reason}
    if exc.status is None:
        return ErrorInfo("network", msg, name, transient=True, details=details)
    if exc.status in _AUTH_STATUSES:
        return ErrorInfo("source.auth", msg, name, details=details)
    return ErrorInfo(
        "source.http", msg, name, transient=exc.status in _TRANSIENT_STATUSES, details=details
    )


def classify_error(exc: BaseException, secrets: Iterable[str] = ()) -> ErrorInfo:
    """Best-effort classification of an exception raised during a check.

    - SourceFetchError -> 'source.http' / 'source.auth', or 'network' when no
      HTTP status was received
    - MalformedResponseError -> 'source.malformed'
    - TruncatedResultsError -> 'source.truncated'
    - ConfigError -> 'config'
    - requests transport errors -> 'network' (transient)
    - Fallback -> 'generic'
    """
    msg = redact(str(exc) if exc else "", secrets)
    name = exc.__class__.__name__

    if isinstance(exc, SourceFetchError):
        return _classify_fetch_error(exc, msg)
    if isinstance(exc, MalformedResponseError):
        return ErrorInfo("source.malformed", msg, name)
    if isinstance(exc, TruncatedResultsError):
        return ErrorInfo(
            "source.truncated", msg, name, details={"cursor": exc.cursor, "fetched": exc.fetched}
        )
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    if isinstance(exc, requests.RequestException):
        return ErrorInfo("network", msg, name, transient=True)
    return ErrorInfo("generic", msg, name)


__all__ = ["ErrorInfo", "classify_error", "redact"]
