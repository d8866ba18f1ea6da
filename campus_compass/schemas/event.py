"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from campus_compass.schemas.eta import EtaResponse


class TimeFilter(str, Enum):
    ALL = "all"
    HAPPENING_SOON = "happening-soon"
    MAKE_IT_IN_TIME = "make-it-in-time"


class EventCreate(BaseModel):
    university_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: date
    start_time: time
    end_date: Optional[date] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    coords_lat: Optional[float] = Field(None, ge=-90, le=90)
    coords_lng: Optional[float] = Field(None, ge=-180, le=180)
    categories: list[str] = Field(default_factory=list)
    image_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("categories")
    @classmethod
    def strip_categories(cls, value: list[str]) -> list[str]:
        return [c.strip() for c in value if c and c.strip()]


class EventResponse(BaseModel):
    id: str
    university_id: str
    title: str
    description: Optional[str]
    start: datetime
    end: Optional[datetime]
    location: Optional[str]
    coords_lat: Optional[float]
    coords_lng: Optional[float]
    categories: list[str]
    image: Optional[str]
    popularity: int
    dedupe_key: str
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListItem(EventResponse):
    user_registration_status: Optional[str] = None
    eta: Optional[EtaResponse] = None


class EventListResponse(BaseModel):
    events: list[EventListItem]
    university_id: str
    time_filter: TimeFilter
    limit: int
    offset: int
    eta_unavailable: bool = False


class ExtractionRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=20000)
    university_id: str = Field(..., min_length=1, max_length=64)


class ExtractedEvent(BaseModel):
    title: str
    description: Optional[str] = None
    start_date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:MM, 24-hour")
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None


class ExtractionResponse(BaseModel):
    success: bool
    data: Optional[ExtractedEvent] = None
    error: Optional[str] = None
