"""Coach → student pairing request."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Index, Text, text
from sqlalchemy.orm import relationship

from studentcoach.database import Base
from studentcoach.models.enums import RequestStatus


class CoachStudentRequest(Base):
    __tablename__ = "coach_student_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    coach_id = Column(String(36), ForeignKey("coach_profiles.id"), nullable=False)
    student_id = Column(String(36), ForeignKey("student_profiles.id"), nullable=False)
    status = Column(
        Enum(RequestStatus, native_enum=False, length=20),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    responded_at = Column(DateTime, nullable=True)

    # Relationships
    coach = relationship("CoachProfile", back_populates="sent_requests")
    student = relationship("StudentProfile", back_populates="received_requests")

    __table_args__ = (
        # At most one open request per (coach, student)
        Index(
            "uq_coach_student_requests_pending_pair",
            "coach_id",
            "student_id",
            unique=True,
            sqlite_where=text("status = 'PENDING'"),
            postgresql_where=text("status = 'PENDING'"),
        ),
    )
