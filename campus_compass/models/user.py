"""
User model with secure password storage.
"""

from sqlalchemy import Column, Integer, String, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from campus_compass.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    university_id = Column(String(64), ForeignKey("universities.id"), nullable=False)
    interests = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)

    university = relationship("University", back_populates="users", lazy="raise")
    registrations = relationship("UserEvent", back_populates="user", lazy="raise")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
