"""
Event service: listing, lookup, categories, map feed and organizer submissions.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.core.errors import NotFoundError, InvalidInputError
from campus_compass.core.logging import get_logger
from campus_compass.models.event import Event, EventCategory
from campus_compass.models.registration import UserEvent
from campus_compass.schemas.event import EventCreate, TimeFilter
from campus_compass.services import cache_service
from campus_compass.services.university_service import get_university
from campus_compass.utils.geo import make_dedupe_key, resolve_timezone

logger = get_logger(__name__)

HAPPENING_SOON_WINDOW = timedelta(hours=24)


def _time_window(time_filter: TimeFilter, now: datetime) -> tuple[datetime, Optional[datetime]]:
    if time_filter == TimeFilter.HAPPENING_SOON:
        return now, now + HAPPENING_SOON_WINDOW
    # "all" and "make-it-in-time" share the lower bound; the ETA predicate is applied by the caller
    return now, None


async def list_events(
    db: AsyncSession,
    university_id: str,
    interests: Optional[Sequence[str]] = None,
    time_filter: TimeFilter = TimeFilter.ALL,
    limit: int = 20,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> list[Event]:
    """
    Upcoming events for a university, soonest first.
    Ties on start time go to the more popular event.
    Uses the ix_events_university_start index.
    """
    now = now or datetime.now(timezone.utc)
    lower, upper = _time_window(time_filter, now)

    query = select(Event).where(Event.university_id == university_id, Event.start >= lower)
    if upper is not None:
        query = query.where(Event.start <= upper)

    tags = [tag for tag in (interests or []) if tag]
    if tags:
        query = query.where(
            Event.id.in_(select(EventCategory.event_id).where(EventCategory.name.in_(tags)))
        )

    query = (
        query
        .order_by(Event.start.asc(), Event.popularity.desc(), Event.id.asc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_registration_statuses(
    db: AsyncSession,
    user_id: int,
    event_ids: Sequence[str],
) -> dict[str, str]:
    """Map of event id -> status, only for events the user has a record for."""
    if not event_ids:
        return {}
    result = await db.execute(
        select(UserEvent.event_id, UserEvent.status).where(
            UserEvent.user_id == user_id,
            UserEvent.event_id.in_(list(event_ids)),
        )
    )
    return {event_id: status for event_id, status in result.all()}


async def get_event(db: AsyncSession, event_id: str) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def get_event_categories(db: AsyncSession, university_id: str) -> list[str]:
    """Sorted unique category tags across a university's events (past ones included)."""
    key = cache_service.categories_key(university_id)
    cached = await cache_service.get_cached(key)
    if cached is not None:
        return cached

    result = await db.execute(
        select(EventCategory.name)
        .join(Event, Event.id == EventCategory.event_id)
        .where(Event.university_id == university_id)
        .distinct()
    )
    categories = sorted(set(result.scalars().all()))

    await cache_service.set_cached(key, categories)
    return categories


async def list_map_events(
    db: AsyncSession,
    university_id: str,
    limit: int = 100,
    now: Optional[datetime] = None,
) -> list[Event]:
    """Upcoming events that can be plotted, i.e. the ones with coordinates."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(Event)
        .where(
            Event.university_id == university_id,
            Event.start >= now,
            Event.coords_lat.is_not(None),
            Event.coords_lng.is_not(None),
        )
        .order_by(Event.start.asc(), Event.popularity.desc(), Event.id.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


def _combine(day, clock, tz_name: str) -> datetime:
    return datetime.combine(day, clock, tzinfo=resolve_timezone(tz_name)).astimezone(timezone.utc)


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """
    Create an organizer-submitted event.
    Dates and times are wall-clock values in the university's timezone.
    """
    university = await get_university(db, event_data.university_id)

    start = _combine(event_data.start_date, event_data.start_time, university.tz)
    end = None
    if event_data.end_time is not None:
        end = _combine(event_data.end_date or event_data.start_date, event_data.end_time, university.tz)
        if end < start:
            raise InvalidInputError("Event end must not be before its start")

    categories = list(dict.fromkeys(event_data.categories))
    event = Event(
        university_id=university.id,
        title=event_data.title,
        description=event_data.description,
        start=start,
        end=end,
        location=event_data.location,
        coords_lat=event_data.coords_lat,
        coords_lng=event_data.coords_lng,
        image=event_data.image_url,
        popularity=0,
        dedupe_key=make_dedupe_key(event_data.title, event_data.start_date, event_data.location),
        source_ids=[],
        category_links=[EventCategory(name=name) for name in categories],
    )
    db.add(event)
    await db.flush()

    await cache_service.invalidate(cache_service.categories_key(university.id))

    logger.info("event_created", event_id=event.id, university_id=university.id, title=event.title)
    return event
