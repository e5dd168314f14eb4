"""Admin service — user directory and platform statistics."""

from typing import Optional

from sqlalchemy.orm import Session

from studentcoach.models.assignment import Assignment
from studentcoach.models.enums import UserRole, UserStatus
from studentcoach.models.user import User


def list_users(
    db: Session,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
) -> list[dict]:
    """All users, newest first, with the profile columns shown in the admin table."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)

    result = []
    for u in query.order_by(User.created_at.desc()).all():
        profile = None
        if u.coach_profile:
            profile = {
                "first_name": u.coach_profile.first_name,
                "last_name": u.coach_profile.last_name,
                "phone": u.coach_profile.phone,
            }
        elif u.student_profile:
            profile = {
                "first_name": u.student_profile.first_name,
                "last_name": u.student_profile.last_name,
                "grade": u.student_profile.grade,
                "current_coach_id": u.student_profile.current_coach_id,
            }
        result.append({
            "id": u.id,
            "email": u.email,
            "role": u.role,
            "status": u.status,
            "created_at": u.created_at,
            "approved_at": u.approved_at,
            "profile": profile,
        })
    return result


def get_stats(db: Session) -> dict:
    return {
        "total_users": db.query(User).count(),
        "pending_users": db.query(User).filter(User.status == UserStatus.PENDING).count(),
        "coaches": db.query(User).filter(User.role == UserRole.COACH).count(),
        "students": db.query(User).filter(User.role == UserRole.STUDENT).count(),
        "assignments": db.query(Assignment).count(),
    }
