"""
Pydantic schemas for walking ETA responses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class CoordinatesSchema(BaseModel):
    lat: float
    lng: float


class EtaResponse(BaseModel):
    duration_minutes: int
    duration_text: str
    distance_text: str
    leave_by: datetime
    leave_by_time: str
    can_make_it: bool


class EventEtaResponse(BaseModel):
    event_id: str
    origin: CoordinatesSchema
    origin_source: str
    available: bool
    eta: Optional[EtaResponse] = None
