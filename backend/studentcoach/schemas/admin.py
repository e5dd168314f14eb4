"""Admin request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from studentcoach.models.enums import UserRole, UserStatus


class AdminUserResponse(BaseModel):
    id: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: datetime
    approved_at: Optional[datetime] = None
    profile: Optional[dict] = None


class StatsResponse(BaseModel):
    total_users: int
    pending_users: int
    coaches: int
    students: int
    assignments: int


class ChangeCoachRequest(BaseModel):
    new_coach_id: str
    reason: str


class CoachChangeLogResponse(BaseModel):
    id: str
    student_id: str
    old_coach_id: Optional[str] = None
    new_coach_id: str
    changed_by: str
    reason: str
    created_at: datetime

    class Config:
        from_attributes = True
