"""Student check-in — free-text note, optionally tied to an assignment."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from studentcoach.database import Base


class StudentCheckin(Base):
    __tablename__ = "student_checkins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("student_profiles.id"), nullable=False, index=True)
    assignment_id = Column(String(36), ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    student = relationship("StudentProfile", back_populates="checkins")
    assignment = relationship("Assignment", back_populates="checkins")
