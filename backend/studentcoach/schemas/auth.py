"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from studentcoach.models.enums import UserRole, UserStatus


class RegisterCoachRequest(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None


class RegisterStudentRequest(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    first_name: str
    last_name: str
    grade: str
    phone: Optional[str] = None
    parent_phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class PublicUser(BaseModel):
    id: str
    email: str
    role: UserRole
    status: UserStatus

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: PublicUser


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
