"""
Pydantic schemas for university reference data.
"""

from pydantic import BaseModel


class UniversityResponse(BaseModel):
    id: str
    name: str
    tz: str
    center_lat: float
    center_lng: float

    model_config = {"from_attributes": True}
