"""
Event endpoints: listing with registration annotations, lookup, categories,
map feed, walking ETA and organizer submissions.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.api.deps import get_routing_gateway
from campus_compass.db.session import get_db
from campus_compass.core.config import get_settings
from campus_compass.core.security import get_current_user_id, get_optional_user_id
from campus_compass.core.logging import get_logger
from campus_compass.models.university import University
from campus_compass.schemas.eta import CoordinatesSchema, EtaResponse, EventEtaResponse
from campus_compass.schemas.event import (
    EventCreate, EventResponse, EventListItem, EventListResponse, TimeFilter,
    ExtractionRequest, ExtractionResponse,
)
from campus_compass.services import event_service
from campus_compass.services.eta_service import EtaTarget, RoutingGateway, estimate_eta, estimate_many
from campus_compass.services.extraction_service import extract_event_from_text
from campus_compass.services.positioning import resolve_position
from campus_compass.services.university_service import get_university
from campus_compass.utils.geo import Coordinates, resolve_timezone
from campus_compass.utils.search import filter_by_search

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


async def _keep_reachable(
    items: list[EventListItem],
    gateway: RoutingGateway,
    origin: Coordinates,
    tz: Optional[str],
) -> tuple[list[EventListItem], bool]:
    """
    Apply the "make it in time" predicate to a fetched page.

    Events without coordinates are dropped. Events whose ETA is unavailable
    (including ones whose stored coordinates are out of range) stay in the
    list without an ETA and the second return value is True.
    """
    located = [item for item in items if item.coords_lat is not None and item.coords_lng is not None]
    etas = await estimate_many(
        gateway,
        origin,
        (
            EtaTarget(
                key=item.id,
                destination=Coordinates.from_optional(item.coords_lat, item.coords_lng),
                arrive_by=item.start,
            )
            for item in located
        ),
        buffer_minutes=get_settings().ETA_BUFFER_MINUTES,
        tz=tz,
    )

    kept: list[EventListItem] = []
    unavailable = False
    for item in located:
        eta = etas.get(item.id)
        if eta is None:
            unavailable = True
            kept.append(item)
        elif eta.can_make_it:
            kept.append(item.model_copy(update={"eta": EtaResponse(**asdict(eta))}))
    return kept, unavailable


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    university_id: str = Query(..., min_length=1, max_length=64),
    interests: Optional[list[str]] = Query(None),
    time_filter: TimeFilter = Query(TimeFilter.ALL),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, max_length=200),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    user_id: Optional[int] = Depends(get_optional_user_id),
    gateway: RoutingGateway = Depends(get_routing_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    List upcoming events for a university, soonest first.

    A valid bearer token adds the caller's registration status to each event.
    An invalid one is ignored rather than rejected.
    """
    events = await event_service.list_events(db, university_id, interests, time_filter, limit, offset)

    statuses: dict[str, str] = {}
    if user_id is not None:
        statuses = await event_service.get_registration_statuses(db, user_id, [e.id for e in events])

    items = [
        EventListItem.model_validate(e).model_copy(update={"user_registration_status": statuses.get(e.id)})
        for e in events
    ]
    items = filter_by_search(items, search)

    eta_unavailable = False
    if time_filter == TimeFilter.MAKE_IT_IN_TIME:
        university = await db.get(University, university_id)
        position = resolve_position(lat, lng, university)
        items, eta_unavailable = await _keep_reachable(
            items, gateway, position.coordinates, university.tz if university else None
        )
        if eta_unavailable:
            logger.warning("events_eta_partially_unavailable", university_id=university_id)

    return EventListResponse(
        events=items,
        university_id=university_id,
        time_filter=time_filter,
        limit=limit,
        offset=offset,
        eta_unavailable=eta_unavailable,
    )


@router.get("/categories", response_model=list[str])
async def list_categories_endpoint(
    university_id: str = Query(..., min_length=1, max_length=64),
    db: AsyncSession = Depends(get_db),
):
    """Sorted unique category tags for a university. Cached in Redis."""
    return await event_service.get_event_categories(db, university_id)


@router.get("/map", response_model=list[EventResponse])
async def map_events_endpoint(
    university_id: str = Query(..., min_length=1, max_length=64),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming events that have coordinates."""
    return await event_service.list_map_events(db, university_id, limit)


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create an organizer-submitted event. Requires authentication."""
    event = await event_service.create_event(db, event_data)
    logger.info("event_submitted", event_id=event.id, submitted_by=user_id)
    return event


@router.post("/extract", response_model=ExtractionResponse)
async def extract_event_endpoint(
    payload: ExtractionRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Pre-fill an event form from free text with an LLM. Failures come back as success=false.
    Relative dates ("tomorrow") resolve against today in the university's timezone.
    """
    university = await get_university(db, payload.university_id)
    today = datetime.now(resolve_timezone(university.tz)).date()
    return await extract_event_from_text(payload.text, today=today)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a single event by ID."""
    return await event_service.get_event(db, event_id)


@router.get("/{event_id}/eta", response_model=EventEtaResponse)
async def event_eta_endpoint(
    event_id: str,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    buffer_minutes: Optional[int] = Query(None, ge=0, le=120),
    gateway: RoutingGateway = Depends(get_routing_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    Walking ETA from the caller (or their campus center) to an event.
    `available=false` means the ETA could not be computed, not that the event is out of reach.
    """
    event = await event_service.get_event(db, event_id)
    university = await db.get(University, event.university_id)
    position = resolve_position(lat, lng, university)

    destination = Coordinates.from_optional(event.coords_lat, event.coords_lng)
    buffer = buffer_minutes if buffer_minutes is not None else get_settings().ETA_BUFFER_MINUTES
    eta = None
    if destination is not None:
        eta = await estimate_eta(
            gateway,
            position.coordinates,
            destination,
            event.start,
            buffer_minutes=buffer,
            tz=university.tz if university else None,
        )

    return EventEtaResponse(
        event_id=event.id,
        origin=CoordinatesSchema(lat=position.coordinates.lat, lng=position.coordinates.lng),
        origin_source=position.source,
        available=eta is not None,
        eta=EtaResponse(**asdict(eta)) if eta is not None else None,
    )
