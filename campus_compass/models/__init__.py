from campus_compass.models.university import University
from campus_compass.models.event import Event, EventCategory
from campus_compass.models.user import User
from campus_compass.models.registration import UserEvent

__all__ = ["University", "Event", "EventCategory", "User", "UserEvent"]
