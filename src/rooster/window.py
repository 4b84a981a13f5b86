"""Day-window arithmetic for issue queries.

A window covering ``N`` days is the half-open interval::

    [start_of_today - (N - 1) * 24h, start_of_today + 24h)

``start_of_today`` is midnight of the current calendar day in the chosen
zone (the process-local zone by default). The offsets are applied in UTC so
they are always exactly 24 hours, even across a DST change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

DAY = timedelta(hours=24)


@dataclass(frozen=True)
class IssueWindow:
    start: datetime
    end: datetime
    days: int

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def as_query_params(self) -> dict[str, str]:
        return {"start_time": to_iso8601(self.start), "end_time": to_iso8601(self.end)}


def to_iso8601(moment: datetime) -> str:
    """Serialize as UTC with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _validate_days(days: int) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise ValueError(f"days must be an integer, got {days!r}")
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    return days


def start_of_day(now: datetime, tz: tzinfo | None = None) -> datetime:
    if tz is not None:
        local = now.replace(tzinfo=tz) if now.tzinfo is None else now.astimezone(tz)
        return local.replace(hour=0, minute=0, second=0, microsecond=0)
    # naive values are read as process-local wall time; astimezone() gives a
    # fixed offset for *now*, so midnight is rebuilt to pick up its own offset
    local = now.astimezone()
    return datetime(local.year, local.month, local.day).astimezone()


def compute_window(days: int, now: datetime | None = None, tz: tzinfo | None = None) -> IssueWindow:
    _validate_days(days)
    if now is None:
        now = datetime.now(tz) if tz is not None else datetime.now().astimezone()
    today = start_of_day(now, tz).astimezone(timezone.utc)
    return IssueWindow(start=today - (days - 1) * DAY, end=today + DAY, days=days)


__all__ = ["IssueWindow", "compute_window", "start_of_day", "to_iso8601", "DAY"]
