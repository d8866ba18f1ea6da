"""
Coordinate and duration helpers shared by the ETA, positioning and
organizer flows. Pure functions, no I/O.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_SLUG_RE = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"longitude out of range: {self.lng}")

    @classmethod
    def from_optional(cls, lat: Optional[float], lng: Optional[float]) -> Optional["Coordinates"]:
        """Build a point when both parts are present and in range."""
        if lat is None or lng is None:
            return None
        try:
            return cls(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError):
            return None

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


def format_duration(minutes: int) -> str:
    """45 -> "45 min", 120 -> "2h", 95 -> "1h 35m"."""
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}m"


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def format_clock_time(moment: datetime, tz: Optional[str] = None) -> str:
    """12-hour clock time without a leading zero, e.g. "3:05 PM"."""
    local = moment.astimezone(resolve_timezone(tz))
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def make_dedupe_key(title: str, start_date: date, location: Optional[str]) -> str:
    title_part = _SLUG_RE.sub("-", title.lower())
    location_part = _SLUG_RE.sub("-", location.lower()) if location else "no-location"
    return f"{title_part}-{start_date.isoformat()}-{location_part}"
