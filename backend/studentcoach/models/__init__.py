"""SQLAlchemy ORM models."""

from studentcoach.models.enums import UserRole, UserStatus, RequestStatus
from studentcoach.models.user import User
from studentcoach.models.coach_profile import CoachProfile
from studentcoach.models.student_profile import StudentProfile
from studentcoach.models.coach_request import CoachStudentRequest
from studentcoach.models.assignment import Assignment, AssignmentItem, AssignmentItemProgress
from studentcoach.models.checkin import StudentCheckin
from studentcoach.models.coach_change_log import CoachChangeLog
from studentcoach.models.refresh_token import RefreshToken

__all__ = [
    "UserRole",
    "UserStatus",
    "RequestStatus",
    "User",
    "CoachProfile",
    "StudentProfile",
    "CoachStudentRequest",
    "Assignment",
    "AssignmentItem",
    "AssignmentItemProgress",
    "StudentCheckin",
    "CoachChangeLog",
    "RefreshToken",
]
