"""Authorization context resolved once per request."""

from dataclasses import dataclass
from typing import Optional

from studentcoach.errors import NotFoundError
from studentcoach.models.enums import UserRole
from studentcoach.models.user import User


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, with its profile ids already looked up."""

    user_id: str
    email: str
    role: UserRole
    coach_profile_id: Optional[str] = None
    student_profile_id: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            email=user.email,
            role=user.role,
            coach_profile_id=user.coach_profile.id if user.coach_profile else None,
            student_profile_id=user.student_profile.id if user.student_profile else None,
        )

    def require_coach_profile(self) -> str:
        if self.role is not UserRole.COACH or not self.coach_profile_id:
            raise NotFoundError("Coach profile not found")
        return self.coach_profile_id

    def require_student_profile(self) -> str:
        if self.role is not UserRole.STUDENT or not self.student_profile_id:
            raise NotFoundError("Student profile not found")
        return self.student_profile_id
