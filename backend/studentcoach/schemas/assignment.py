"""Assignment, progress and check-in schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AssignmentItemCreate(BaseModel):
    subject: str
    topic: str
    source: Optional[str] = None
    question_count: int = Field(ge=1)


class AssignmentCreate(BaseModel):
    student_id: str
    start_date: datetime
    end_date: datetime
    items: list[AssignmentItemCreate] = Field(min_length=1)


class AssignmentUpdate(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AssignmentItemResponse(BaseModel):
    id: str
    subject: str
    topic: str
    source: Optional[str] = None
    question_count: int
    completed_count: Optional[int] = None  # None until the student first reports


class CheckinCreate(BaseModel):
    assignment_id: Optional[str] = None
    note: Optional[str] = None


class CheckinResponse(BaseModel):
    id: str
    student_id: str
    assignment_id: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ItemProgressResponse(BaseModel):
    id: str
    subject: str
    topic: str
    question_count: int
    completed_count: int
    progress_percentage: float


class ProgressResponse(BaseModel):
    assignment_id: str
    total_questions: int
    completed_questions: int
    progress_percentage: float
    items: list[ItemProgressResponse]


class AssignmentResponse(BaseModel):
    id: str
    coach_id: str
    student_id: str
    start_date: datetime
    end_date: datetime
    created_at: datetime
    items: list[AssignmentItemResponse]
    progress: ProgressResponse


class AssignmentDetailResponse(AssignmentResponse):
    checkins: list[CheckinResponse]


class ProgressReport(BaseModel):
    assignment_item_id: str
    completed_count: int = Field(ge=0)


class ProgressReportResponse(BaseModel):
    assignment_item_id: str
    completed_count: int
