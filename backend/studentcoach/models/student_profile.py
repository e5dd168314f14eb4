"""Student profile model — holds the student's current coach pairing."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, ForeignKey
from sqlalchemy.orm import relationship

from studentcoach.database import Base


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    grade = Column(String(50), nullable=False)
    phone = Column(String(30), nullable=True)
    parent_phone = Column(String(30), nullable=True)

    # The pairing: changed only by request acceptance or admin reassignment
    current_coach_id = Column(String(36), ForeignKey("coach_profiles.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="student_profile")
    current_coach = relationship("CoachProfile", back_populates="students")
    received_requests = relationship("CoachStudentRequest", back_populates="student")
    assignments = relationship("Assignment", back_populates="student")
    checkins = relationship("StudentCheckin", back_populates="student")
