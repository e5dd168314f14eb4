"""Student service — profile, dashboard and check-ins."""

from typing import Optional

from sqlalchemy.orm import Session

from studentcoach.clock import utcnow
from studentcoach.errors import ForbiddenError, NotFoundError
from studentcoach.models.assignment import Assignment
from studentcoach.models.checkin import StudentCheckin
from studentcoach.models.coach_request import CoachStudentRequest
from studentcoach.models.enums import RequestStatus
from studentcoach.models.student_profile import StudentProfile
from studentcoach.principal import Principal

UPCOMING_ASSIGNMENTS = 5

# Fields a student may edit on their own profile; never current_coach_id
EDITABLE_FIELDS = ("first_name", "last_name", "phone", "parent_phone", "grade")


def get_profile(db: Session, principal: Principal) -> StudentProfile:
    student_id = principal.require_student_profile()
    profile = db.query(StudentProfile).filter(StudentProfile.id == student_id).first()
    if not profile:
        raise NotFoundError("Student profile not found")
    return profile


def update_profile(db: Session, principal: Principal, changes: dict) -> StudentProfile:
    profile = get_profile(db, principal)
    for field in EDITABLE_FIELDS:
        if changes.get(field) is not None:
            setattr(profile, field, changes[field])
    db.commit()
    db.refresh(profile)
    return profile


def dashboard(db: Session, principal: Principal) -> dict:
    """Current coach, open coach requests and the next assignments due."""
    profile = get_profile(db, principal)

    pending = (
        db.query(CoachStudentRequest)
        .filter(
            CoachStudentRequest.student_id == profile.id,
            CoachStudentRequest.status == RequestStatus.PENDING,
        )
        .order_by(CoachStudentRequest.created_at.desc())
        .all()
    )
    upcoming = (
        db.query(Assignment)
        .filter(Assignment.student_id == profile.id, Assignment.end_date >= utcnow())
        .order_by(Assignment.end_date.asc())
        .limit(UPCOMING_ASSIGNMENTS)
        .all()
    )

    return {
        "profile": profile,
        "current_coach": profile.current_coach,
        "pending_requests": pending,
        "upcoming_assignments": upcoming,
    }


def create_checkin(
    db: Session,
    principal: Principal,
    assignment_id: Optional[str] = None,
    note: Optional[str] = None,
) -> StudentCheckin:
    student_id = principal.require_student_profile()

    if assignment_id:
        assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
        if not assignment:
            raise NotFoundError("Assignment not found")
        if assignment.student_id != student_id:
            raise ForbiddenError("This assignment does not belong to you")

    checkin = StudentCheckin(student_id=student_id, assignment_id=assignment_id, note=note)
    db.add(checkin)
    db.commit()
    db.refresh(checkin)
    return checkin


def list_checkins(db: Session, principal: Principal) -> list[StudentCheckin]:
    student_id = principal.require_student_profile()
    return (
        db.query(StudentCheckin)
        .filter(StudentCheckin.student_id == student_id)
        .order_by(StudentCheckin.created_at.desc())
        .all()
    )
