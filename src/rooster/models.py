from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

OPEN_STATES: tuple[str, ...] = ("new", "waiting_on_you", "waiting_on_customer", "on_hold")
NEW_STATE = "new"


def _as_dict(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass
class Issue:
    """A support conversation as returned by the Pylon issues endpoint.

    Only ``state`` and ``first_response_time`` drive classification; the
    account/requester/slack blocks are carried through untouched so callers
    can build links or mentions.
    """

    id: str
    number: int
    title: str
    state: str
    created_at: str | None = None
    first_response_time: str | None = None
    link: str | None = None
    account: dict[str, Any] | None = None
    requester: dict[str, Any] | None = None
    slack: dict[str, Any] | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Issue:
        number = payload.get("number")
        return cls(
            id=_as_str(payload.get("id")) or "",
            number=number if isinstance(number, int) and not isinstance(number, bool) else 0,
            title=_as_str(payload.get("title")) or "",
            state=_as_str(payload.get("state")) or "",
            created_at=_as_str(payload.get("created_at")),
            # absent key and explicit null both mean "no agent reply yet"
            first_response_time=_as_str(payload.get("first_response_time")),
            link=_as_str(payload.get("link")),
            account=_as_dict(payload.get("account")),
            requester=_as_dict(payload.get("requester")),
            slack=_as_dict(payload.get("slack")),
            raw=dict(payload),
        )

    @property
    def is_open(self) -> bool:
        return self.state in OPEN_STATES

    @property
    def has_first_response(self) -> bool:
        return self.first_response_time is not None

    @property
    def display_title(self) -> str:
        return self.title or "(no title)"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "created_at": self.created_at,
            "first_response_time": self.first_response_time,
        }
        for key in ("link", "account", "requester", "slack"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


__all__ = ["Issue", "OPEN_STATES", "NEW_STATE"]
