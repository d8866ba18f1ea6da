"""
University reference data. Seeded, never edited through the API.
"""

from sqlalchemy import Column, String, Float
from sqlalchemy.orm import relationship

from campus_compass.db.base import Base


class University(Base):
    __tablename__ = "universities"

    id = Column(String(64), primary_key=True)  # slug, e.g. "ucla"
    name = Column(String(255), nullable=False)
    tz = Column(String(64), nullable=False, default="UTC")
    center_lat = Column(Float, nullable=False)
    center_lng = Column(Float, nullable=False)

    events = relationship("Event", back_populates="university", lazy="raise")
    users = relationship("User", back_populates="university", lazy="raise")

    def __repr__(self) -> str:
        return f"<University(id={self.id}, name={self.name})>"
