"""Coach change log — append-only audit trail of administrative reassignments."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text

from studentcoach.database import Base


class CoachChangeLog(Base):
    __tablename__ = "coach_change_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("student_profiles.id"), nullable=False, index=True)
    old_coach_id = Column(String(36), ForeignKey("coach_profiles.id"), nullable=True)
    new_coach_id = Column(String(36), ForeignKey("coach_profiles.id"), nullable=False)
    changed_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    reason = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
