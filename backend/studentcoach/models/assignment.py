"""Assignment, AssignmentItem and AssignmentItemProgress models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, String, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from studentcoach.database import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    coach_id = Column(String(36), ForeignKey("coach_profiles.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("student_profiles.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    coach = relationship("CoachProfile", back_populates="assignments")
    student = relationship("StudentProfile", back_populates="assignments")
    items = relationship(
        "AssignmentItem",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentItem.position",
    )
    checkins = relationship(
        "StudentCheckin",
        back_populates="assignment",
        order_by="StudentCheckin.created_at.desc()",
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_assignments_date_order"),
    )


class AssignmentItem(Base):
    __tablename__ = "assignment_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id = Column(String(36), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # order within the assignment
    subject = Column(String(255), nullable=False)
    topic = Column(String(255), nullable=False)
    source = Column(String(255), nullable=True)
    question_count = Column(Integer, nullable=False)

    # Relationships
    assignment = relationship("Assignment", back_populates="items")
    progress = relationship(
        "AssignmentItemProgress",
        back_populates="item",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("question_count >= 1", name="ck_assignment_items_question_count"),
    )


class AssignmentItemProgress(Base):
    __tablename__ = "assignment_item_progress"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_item_id = Column(
        String(36),
        ForeignKey("assignment_items.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    completed_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    item = relationship("AssignmentItem", back_populates="progress")
