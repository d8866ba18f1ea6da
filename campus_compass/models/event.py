"""
Event model and its category tags.

Key design decisions:
- Categories live in `event_categories` (one row per event/tag) so that
  interest filtering is a plain indexed IN-subquery on any backend
- Composite index on (university_id, start) covers the listing query
- Coordinates are optional; events without them are skipped by the map
  feed and by ETA filtering
- `popularity` is maintained outside the registration flow
"""

import uuid

from sqlalchemy import (
    Column, Integer, String, Float, Text, JSON, ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from campus_compass.db.base import Base, TimestampMixin, UTCDateTime


def _new_event_id() -> str:
    return uuid.uuid4().hex


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(64), primary_key=True, default=_new_event_id)
    university_id = Column(String(64), ForeignKey("universities.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start = Column(UTCDateTime, nullable=False)
    end = Column(UTCDateTime, nullable=True)
    location = Column(String(255), nullable=True)
    coords_lat = Column(Float, nullable=True)
    coords_lng = Column(Float, nullable=True)
    image = Column(String(1024), nullable=True)
    popularity = Column(Integer, nullable=False, default=0)
    dedupe_key = Column(String(512), nullable=False, index=True)
    source_ids = Column(JSON, nullable=False, default=list)

    university = relationship("University", back_populates="events", lazy="raise")
    category_links = relationship(
        "EventCategory",
        back_populates="event",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    registrations = relationship("UserEvent", back_populates="event", lazy="raise")

    __table_args__ = (
        CheckConstraint("popularity >= 0", name="check_event_popularity_non_negative"),
        Index("ix_events_university_start", "university_id", "start"),
    )

    @property
    def categories(self) -> list[str]:
        return sorted(link.name for link in self.category_links)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, start={self.start})>"


class EventCategory(Base):
    __tablename__ = "event_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False, index=True)

    event = relationship("Event", back_populates="category_links")

    __table_args__ = (
        UniqueConstraint("event_id", "name", name="uq_event_category"),
    )

    def __repr__(self) -> str:
        return f"<EventCategory(event={self.event_id}, name={self.name})>"
