"""Coach profile model — 1:1 extension of a COACH user."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from studentcoach.database import Base


class CoachProfile(Base):
    __tablename__ = "coach_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="coach_profile")
    students = relationship("StudentProfile", back_populates="current_coach")
    sent_requests = relationship("CoachStudentRequest", back_populates="coach")
    assignments = relationship("Assignment", back_populates="coach")
