"""Coach service — dashboard, roster and student search."""

from datetime import timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from studentcoach.clock import utcnow
from studentcoach.models.assignment import Assignment
from studentcoach.models.enums import UserStatus
from studentcoach.models.student_profile import StudentProfile
from studentcoach.models.user import User
from studentcoach.principal import Principal

SEARCH_LIMIT = 20
RECENT_ASSIGNMENTS = 5
DEADLINE_WINDOW_DAYS = 7


def my_students(db: Session, principal: Principal) -> list[StudentProfile]:
    coach_id = principal.require_coach_profile()
    return (
        db.query(StudentProfile)
        .filter(StudentProfile.current_coach_id == coach_id)
        .order_by(StudentProfile.last_name, StudentProfile.first_name)
        .all()
    )


def search_students(db: Session, query: str) -> list[StudentProfile]:
    """Approved students without a coach whose name or email contains query."""
    pattern = f"%{query}%"
    return (
        db.query(StudentProfile)
        .join(User, StudentProfile.user_id == User.id)
        .filter(
            StudentProfile.current_coach_id.is_(None),
            User.status == UserStatus.APPROVED,
            or_(
                StudentProfile.first_name.ilike(pattern),
                StudentProfile.last_name.ilike(pattern),
                User.email.ilike(pattern),
            ),
        )
        .limit(SEARCH_LIMIT)
        .all()
    )


def dashboard(db: Session, principal: Principal) -> dict:
    """Roster, latest assignments and the deadlines coming up this week."""
    coach_id = principal.require_coach_profile()
    students = my_students(db, principal)

    recent = (
        db.query(Assignment)
        .filter(Assignment.coach_id == coach_id)
        .order_by(Assignment.created_at.desc())
        .limit(RECENT_ASSIGNMENTS)
        .all()
    )

    now = utcnow()
    upcoming = (
        db.query(Assignment)
        .filter(
            Assignment.coach_id == coach_id,
            Assignment.end_date >= now,
            Assignment.end_date <= now + timedelta(days=DEADLINE_WINDOW_DAYS),
        )
        .order_by(Assignment.end_date.asc())
        .all()
    )

    return {
        "students": students,
        "recent_assignments": recent,
        "upcoming_deadlines": upcoming,
        "total_students": len(students),
        "total_assignments": db.query(Assignment).filter(Assignment.coach_id == coach_id).count(),
    }
