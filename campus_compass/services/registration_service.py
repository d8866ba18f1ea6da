"""
Registration service: the per (user, event) status machine.

STATES
======

    none ──register──▶ going ──cancel──▶ cancelled
      │                  ▲                   │
      │                  └─────register──────┘
      └──interested──▶ interested ──register──▶ going

- `register` always lands in `going` and replaces custom_fields wholesale.
- `cancel` needs an existing record and never deletes it.
- `interested` can only be entered from `none`.
- Event popularity is not touched here.

CONCURRENCY
===========

Two register calls for the same pair can both see "no record" and both
INSERT. The unique constraint `uq_user_event` rejects the second one; we
roll back and retry, and the retry sees the winner's row and updates it
(last writer wins on status/custom_fields).
"""

from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_compass.core.errors import ConflictError, NotFoundError
from campus_compass.core.logging import get_logger
from campus_compass.core.metrics import record_registration
from campus_compass.models.event import Event
from campus_compass.models.registration import (
    UserEvent, STATUS_GOING, STATUS_INTERESTED, STATUS_CANCELLED,
)
from campus_compass.services.event_service import get_registration_statuses

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 2


async def _ensure_event_exists(db: AsyncSession, event_id: str) -> None:
    result = await db.execute(select(Event.id).where(Event.id == event_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError(f"Event {event_id} not found")


async def _find_registration(db: AsyncSession, user_id: int, event_id: str) -> Optional[UserEvent]:
    result = await db.execute(
        select(UserEvent).where(
            UserEvent.user_id == user_id,
            UserEvent.event_id == event_id,
        )
    )
    return result.scalar_one_or_none()


async def register(
    db: AsyncSession,
    user_id: int,
    event_id: str,
    custom_fields: Optional[dict[str, Any]] = None,
) -> UserEvent:
    """Put the user in `going` for an event, creating the record on first use."""
    for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
        await _ensure_event_exists(db, event_id)

        registration = await _find_registration(db, user_id, event_id)
        if registration is not None:
            previous = registration.status
            registration.status = STATUS_GOING
            registration.custom_fields = custom_fields
            await db.flush()

            record_registration("register", "updated")
            logger.info(
                "registration_updated",
                registration_id=registration.id,
                user_id=user_id,
                event_id=event_id,
                previous_status=previous,
            )
            return registration

        registration = UserEvent(
            user_id=user_id,
            event_id=event_id,
            status=STATUS_GOING,
            custom_fields=custom_fields,
        )
        db.add(registration)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent request inserted the same pair first
            await db.rollback()
            logger.info("registration_retry", user_id=user_id, event_id=event_id, attempt=attempt)
            if attempt == MAX_RETRY_ATTEMPTS:
                record_registration("register", "conflict")
                raise ConflictError("Registration is being updated, please try again")
            continue

        record_registration("register", "created")
        logger.info(
            "registration_created",
            registration_id=registration.id,
            user_id=user_id,
            event_id=event_id,
        )
        return registration

    raise ConflictError("Registration is being updated, please try again")


async def cancel(db: AsyncSession, user_id: int, event_id: str) -> UserEvent:
    """Move an existing registration to `cancelled`. The row is kept."""
    registration = await _find_registration(db, user_id, event_id)
    if registration is None:
        record_registration("cancel", "not_found")
        raise NotFoundError("Registration not found")

    registration.status = STATUS_CANCELLED
    await db.flush()

    record_registration("cancel", "updated")
    logger.info(
        "registration_cancelled",
        registration_id=registration.id,
        user_id=user_id,
        event_id=event_id,
    )
    return registration


async def mark_interested(db: AsyncSession, user_id: int, event_id: str) -> UserEvent:
    """Record interest in an event the user has no registration for yet."""
    await _ensure_event_exists(db, event_id)

    registration = await _find_registration(db, user_id, event_id)
    if registration is not None:
        if registration.status == STATUS_INTERESTED:
            return registration
        record_registration("interested", "conflict")
        raise ConflictError(f"Registration already exists with status '{registration.status}'")

    registration = UserEvent(
        user_id=user_id,
        event_id=event_id,
        status=STATUS_INTERESTED,
        custom_fields=None,
    )
    db.add(registration)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        record_registration("interested", "conflict")
        raise ConflictError("Registration is being updated, please try again")

    record_registration("interested", "created")
    logger.info("registration_interested", registration_id=registration.id, user_id=user_id, event_id=event_id)
    return registration


async def query_status(db: AsyncSession, user_id: int, event_ids: Sequence[str]) -> dict[str, str]:
    return await get_registration_statuses(db, user_id, event_ids)


async def list_registrations(
    db: AsyncSession,
    user_id: int,
    status: Optional[str] = None,
) -> list[UserEvent]:
    """All of a user's registrations with their events, newest first."""
    query = (
        select(UserEvent)
        .options(selectinload(UserEvent.event))
        .where(UserEvent.user_id == user_id)
    )
    if status is not None:
        query = query.where(UserEvent.status == status)

    result = await db.execute(query.order_by(UserEvent.created_at.desc(), UserEvent.id.desc()))
    return list(result.scalars().all())
