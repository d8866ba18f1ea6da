"""
Pydantic schemas for event registrations.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from campus_compass.schemas.event import EventResponse


class RegistrationStatus(str, Enum):
    GOING = "going"
    INTERESTED = "interested"
    CANCELLED = "cancelled"


class RegistrationCreate(BaseModel):
    event_id: str = Field(..., min_length=1, max_length=64)
    custom_fields: Optional[dict[str, Any]] = None


class InterestedCreate(BaseModel):
    event_id: str = Field(..., min_length=1, max_length=64)


class RegistrationResponse(BaseModel):
    id: int
    user_id: int
    event_id: str
    status: RegistrationStatus
    custom_fields: Optional[dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RegistrationWithEvent(RegistrationResponse):
    event: EventResponse


class StatusQuery(BaseModel):
    event_ids: list[str] = Field(..., max_length=500)
