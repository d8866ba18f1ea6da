"""
Registration model binding one user to one event.

Key design decisions:
- Unique constraint on (user_id, event_id): repeated registrations update
  the row in place, concurrent inserts collapse to a single record
- Cancelling flips the status instead of deleting, so history survives
- custom_fields is an opaque JSON map collected by the registration form
"""

from sqlalchemy import Column, Integer, String, JSON, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from campus_compass.db.base import Base, TimestampMixin

STATUS_GOING = "going"
STATUS_INTERESTED = "interested"
STATUS_CANCELLED = "cancelled"
REGISTRATION_STATUSES = (STATUS_GOING, STATUS_INTERESTED, STATUS_CANCELLED)


class UserEvent(Base, TimestampMixin):
    __tablename__ = "user_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(String(64), ForeignKey("events.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_GOING)
    custom_fields = Column(JSON, nullable=True)

    user = relationship("User", back_populates="registrations", lazy="raise")
    event = relationship("Event", back_populates="registrations", lazy="raise")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_user_event"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in REGISTRATION_STATUSES) + ")",
            name="check_user_event_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<UserEvent(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
