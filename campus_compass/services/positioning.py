"""
Positioning gateway: works out where the caller is.

The device position is whatever the client sends (browser geolocation).
When it is missing or invalid, which is what a denied or timed-out
geolocation prompt looks like from here, we fall back to the university's
campus center, and then to the configured default campus center.
"""

from dataclasses import dataclass
from typing import Optional

from campus_compass.core.config import get_settings
from campus_compass.models.university import University
from campus_compass.utils.geo import Coordinates

SOURCE_DEVICE = "device"
SOURCE_CAMPUS_CENTER = "campus_center"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class Position:
    coordinates: Coordinates
    source: str


def default_campus_center() -> Coordinates:
    settings = get_settings()
    return Coordinates(lat=settings.DEFAULT_CAMPUS_CENTER_LAT, lng=settings.DEFAULT_CAMPUS_CENTER_LNG)


def resolve_position(
    lat: Optional[float],
    lng: Optional[float],
    university: Optional[University] = None,
) -> Position:
    device = Coordinates.from_optional(lat, lng)
    if device is not None:
        return Position(device, SOURCE_DEVICE)

    if university is not None:
        center = Coordinates.from_optional(university.center_lat, university.center_lng)
        if center is not None:
            return Position(center, SOURCE_CAMPUS_CENTER)

    return Position(default_campus_center(), SOURCE_DEFAULT)
