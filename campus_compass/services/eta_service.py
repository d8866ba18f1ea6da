"""
Walking ETA estimation.

Given where the caller is, where the event is and when it starts, work out
how long the walk takes, the latest time to leave (walk + safety buffer
before the start) and whether that time is still ahead of us.

The feature is advisory: every upstream failure becomes `None`
("unavailable"), which callers must render differently from
`can_make_it=False`. Nothing in here raises to the caller.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Protocol

from campus_compass.core.logging import get_logger
from campus_compass.core.metrics import eta_latency, record_eta_lookup
from campus_compass.services.routing import Route, RoutingError
from campus_compass.utils.geo import Coordinates, format_clock_time, format_duration

logger = get_logger(__name__)

DEFAULT_BUFFER_MINUTES = 10


class RoutingGateway(Protocol):
    async def walking_route(self, origin: Coordinates, destination: Coordinates) -> Route:
        ...


@dataclass(frozen=True)
class EtaResult:
    duration_minutes: int
    duration_text: str
    distance_text: str
    leave_by: datetime
    leave_by_time: str
    can_make_it: bool


@dataclass(frozen=True)
class EtaTarget:
    """One destination in a batch lookup."""

    key: str
    destination: Optional[Coordinates]
    arrive_by: datetime


def compute_leave_by(arrive_by: datetime, duration_minutes: int, buffer_minutes: int) -> datetime:
    return arrive_by - timedelta(minutes=duration_minutes + buffer_minutes)


async def estimate_eta(
    gateway: Optional[RoutingGateway],
    origin: Optional[Coordinates],
    destination: Optional[Coordinates],
    arrive_by: Optional[datetime],
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    now: Optional[datetime] = None,
    tz: Optional[str] = None,
) -> Optional[EtaResult]:
    if gateway is None or origin is None or destination is None or arrive_by is None:
        logger.info("eta_skipped", reason="missing_input")
        record_eta_lookup(available=False)
        return None

    started = time.perf_counter()
    try:
        route = await gateway.walking_route(origin, destination)
    except RoutingError as e:
        logger.warning("eta_unavailable", status=e.status, error=str(e))
        record_eta_lookup(available=False)
        return None
    except Exception as e:
        # Gateway construction/transport bugs must not take the listing down
        logger.error("eta_gateway_failed", error=str(e), exc_info=True)
        record_eta_lookup(available=False)
        return None
    finally:
        eta_latency.observe(time.perf_counter() - started)

    duration_minutes = math.ceil(route.duration_seconds / 60)
    leave_by = compute_leave_by(arrive_by, duration_minutes, buffer_minutes)
    # Read the clock at evaluation time: a late evaluation leans towards "cannot make it"
    current = now or datetime.now(timezone.utc)

    record_eta_lookup(available=True)
    return EtaResult(
        duration_minutes=duration_minutes,
        duration_text=format_duration(duration_minutes),
        distance_text=route.distance_text,
        leave_by=leave_by,
        leave_by_time=format_clock_time(leave_by, tz),
        can_make_it=current <= leave_by,
    )


async def estimate_many(
    gateway: Optional[RoutingGateway],
    origin: Optional[Coordinates],
    targets: Iterable[EtaTarget],
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    tz: Optional[str] = None,
) -> dict[str, Optional[EtaResult]]:
    """
    Estimate ETAs for several destinations concurrently.

    Each target is its own task and fills only its own slot, so a slow or
    failing lookup never holds back or spoils its siblings.
    """
    targets = list(targets)
    results = await asyncio.gather(
        *(
            estimate_eta(gateway, origin, target.destination, target.arrive_by, buffer_minutes, tz=tz)
            for target in targets
        )
    )
    return {target.key: result for target, result in zip(targets, results)}
