"""Profile and coach-request schemas shared by the admin, coach and student routers."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from studentcoach.models.enums import RequestStatus


class CoachProfileResponse(BaseModel):
    id: str
    user_id: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class StudentProfileResponse(BaseModel):
    id: str
    user_id: str
    first_name: str
    last_name: str
    grade: str
    phone: Optional[str] = None
    parent_phone: Optional[str] = None
    current_coach_id: Optional[str] = None

    class Config:
        from_attributes = True


class StudentProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    parent_phone: Optional[str] = None
    grade: Optional[str] = None


class CoachRequestCreate(BaseModel):
    message: Optional[str] = None


class CoachRequestRespond(BaseModel):
    status: RequestStatus


class CoachRequestResponse(BaseModel):
    id: str
    coach_id: str
    student_id: str
    status: RequestStatus
    message: Optional[str] = None
    created_at: datetime
    responded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
