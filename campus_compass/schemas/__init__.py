from campus_compass.schemas.user import UserCreate, UserLogin, UserResponse, InterestsUpdate, AuthResponse
from campus_compass.schemas.university import UniversityResponse
from campus_compass.schemas.eta import EtaResponse, EventEtaResponse
from campus_compass.schemas.event import (
    TimeFilter, EventCreate, EventResponse, EventListItem, EventListResponse,
    ExtractionRequest, ExtractedEvent, ExtractionResponse,
)
from campus_compass.schemas.registration import (
    RegistrationStatus, RegistrationCreate, InterestedCreate, RegistrationResponse, RegistrationWithEvent,
    StatusQuery,
)

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "InterestsUpdate", "AuthResponse",
    "UniversityResponse",
    "EtaResponse", "EventEtaResponse",
    "TimeFilter", "EventCreate", "EventResponse", "EventListItem", "EventListResponse",
    "ExtractionRequest", "ExtractedEvent", "ExtractionResponse",
    "RegistrationStatus", "RegistrationCreate", "InterestedCreate", "RegistrationResponse", "RegistrationWithEvent",
    "StatusQuery",
]
