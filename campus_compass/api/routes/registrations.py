"""
Registration endpoints. Every route here requires a valid bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.db.session import get_db
from campus_compass.schemas.registration import (
    RegistrationCreate, InterestedCreate, RegistrationResponse, RegistrationWithEvent,
    RegistrationStatus, StatusQuery,
)
from campus_compass.services import registration_service
from campus_compass.core.security import get_current_user_id

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.post("/", response_model=RegistrationResponse)
async def register_endpoint(
    payload: RegistrationCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Register as going. Creates the record the first time; afterwards the
    same record is switched back to going and its custom fields replaced.
    """
    return await registration_service.register(db, user_id, payload.event_id, payload.custom_fields)


@router.post("/interested", response_model=RegistrationResponse)
async def interested_endpoint(
    payload: InterestedCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark interest in an event the caller has not registered for."""
    return await registration_service.mark_interested(db, user_id, payload.event_id)


@router.post("/status", response_model=dict[str, RegistrationStatus])
async def status_endpoint(
    payload: StatusQuery,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Status per event id, only for events the caller has a record for."""
    return await registration_service.query_status(db, user_id, payload.event_ids)


@router.delete("/{event_id}", response_model=RegistrationResponse)
async def cancel_endpoint(
    event_id: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a registration. The record is kept with status cancelled."""
    return await registration_service.cancel(db, user_id, event_id)


@router.get("/", response_model=list[RegistrationWithEvent])
async def list_registrations_endpoint(
    status: Optional[RegistrationStatus] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's registrations with their events, newest first."""
    return await registration_service.list_registrations(
        db, user_id, status.value if status is not None else None
    )
