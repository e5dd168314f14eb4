"""Matching service — coach requests, student responses, admin reassignment.

The pairing lives in ``StudentProfile.current_coach_id``. It is written in
exactly two places, both inside a unit of work:

1. accepting a request: the request moves PENDING -> ACCEPTED and the
   student's coach is set, together or not at all;
2. an admin reassignment: a CoachChangeLog row is appended and the coach is
   swapped, together or not at all.

Both writes are conditional (compare-and-swap on the value that was read), so
a concurrent accept or reassignment that slipped through the read-side checks
rolls back instead of overwriting.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from studentcoach.clock import utcnow
from studentcoach.database import unit_of_work
from studentcoach.errors import BadRequestError, ForbiddenError, NotFoundError
from studentcoach.models.coach_change_log import CoachChangeLog
from studentcoach.models.coach_profile import CoachProfile
from studentcoach.models.coach_request import CoachStudentRequest
from studentcoach.models.enums import RequestStatus
from studentcoach.models.student_profile import StudentProfile
from studentcoach.principal import Principal

logger = logging.getLogger(__name__)


def _get_student(db: Session, student_id: str) -> StudentProfile:
    student = db.query(StudentProfile).filter(StudentProfile.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found")
    return student


def send_request(
    db: Session,
    principal: Principal,
    student_id: str,
    message: Optional[str] = None,
) -> CoachStudentRequest:
    """Coach offers to take a student who has no coach yet."""
    coach_id = principal.require_coach_profile()
    student = _get_student(db, student_id)

    if student.current_coach_id:
        raise BadRequestError("Student already has a coach")

    existing = (
        db.query(CoachStudentRequest)
        .filter(
            CoachStudentRequest.coach_id == coach_id,
            CoachStudentRequest.student_id == student_id,
            CoachStudentRequest.status == RequestStatus.PENDING,
        )
        .first()
    )
    if existing:
        raise BadRequestError("You already have a pending request for this student")

    request = CoachStudentRequest(
        coach_id=coach_id,
        student_id=student_id,
        status=RequestStatus.PENDING,
        message=message,
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError:
        # partial unique index caught a concurrent duplicate
        db.rollback()
        raise BadRequestError("You already have a pending request for this student")
    db.refresh(request)
    logger.info("Coach request sent: request=%s coach=%s student=%s", request.id, coach_id, student_id)
    return request


def _mark_responded(db: Session, request_id: str, decision: RequestStatus) -> None:
    """PENDING -> decision, only if still PENDING."""
    updated = (
        db.query(CoachStudentRequest)
        .filter(
            CoachStudentRequest.id == request_id,
            CoachStudentRequest.status == RequestStatus.PENDING,
        )
        .update(
            {
                CoachStudentRequest.status: decision,
                CoachStudentRequest.responded_at: utcnow(),
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        raise BadRequestError("Request already responded")


def _assign_coach(
    db: Session,
    student_id: str,
    expected_coach_id: Optional[str],
    new_coach_id: str,
    conflict_detail: str = "Coach assignment changed concurrently",
) -> None:
    """Set the student's coach if it still equals expected_coach_id."""
    query = db.query(StudentProfile).filter(StudentProfile.id == student_id)
    if expected_coach_id is None:
        query = query.filter(StudentProfile.current_coach_id.is_(None))
    else:
        query = query.filter(StudentProfile.current_coach_id == expected_coach_id)

    updated = query.update(
        {
            StudentProfile.current_coach_id: new_coach_id,
            StudentProfile.updated_at: utcnow(),
        },
        synchronize_session=False,
    )
    if updated != 1:
        raise BadRequestError(conflict_detail)


def respond(
    db: Session,
    principal: Principal,
    request_id: str,
    decision: RequestStatus,
) -> CoachStudentRequest:
    """Student accepts or rejects a pending coach request."""
    student_id = principal.require_student_profile()

    request = db.query(CoachStudentRequest).filter(CoachStudentRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Request not found")
    if request.student_id != student_id:
        raise ForbiddenError("This request does not belong to you")
    if request.status is not RequestStatus.PENDING:
        raise BadRequestError("Request already responded")

    if decision is RequestStatus.ACCEPTED:
        student = _get_student(db, student_id)
        if student.current_coach_id:
            raise BadRequestError("You already have a coach")

        coach_id = request.coach_id
        with unit_of_work(db):
            _mark_responded(db, request_id, RequestStatus.ACCEPTED)
            _assign_coach(db, student_id, None, coach_id, conflict_detail="You already have a coach")
        logger.info("Coach request accepted: request=%s coach=%s student=%s", request_id, coach_id, student_id)

    elif decision is RequestStatus.REJECTED:
        with unit_of_work(db):
            _mark_responded(db, request_id, RequestStatus.REJECTED)
        logger.info("Coach request rejected: request=%s student=%s", request_id, student_id)

    else:
        # PENDING is not a response
        raise BadRequestError("Invalid status")

    db.expire_all()
    return db.query(CoachStudentRequest).filter(CoachStudentRequest.id == request_id).one()


def admin_reassign(
    db: Session,
    student_id: str,
    new_coach_id: str,
    reason: str,
    admin_id: str,
) -> CoachChangeLog:
    """Administrative override of the pairing, with an audit trail.

    Ignores any outstanding requests for the student.
    """
    student = _get_student(db, student_id)
    new_coach = db.query(CoachProfile).filter(CoachProfile.id == new_coach_id).first()
    if not new_coach:
        raise NotFoundError("Coach not found")

    old_coach_id = student.current_coach_id
    log = CoachChangeLog(
        student_id=student_id,
        old_coach_id=old_coach_id,
        new_coach_id=new_coach_id,
        changed_by=admin_id,
        reason=reason,
    )
    with unit_of_work(db):
        db.add(log)
        db.flush()
        _assign_coach(db, student_id, old_coach_id, new_coach_id)

    db.expire_all()
    db.refresh(log)
    logger.info(
        "Coach reassigned: student=%s old=%s new=%s admin=%s",
        student_id, old_coach_id, new_coach_id, admin_id,
    )
    return log


def list_requests_for_coach(db: Session, principal: Principal) -> list[CoachStudentRequest]:
    coach_id = principal.require_coach_profile()
    return (
        db.query(CoachStudentRequest)
        .filter(CoachStudentRequest.coach_id == coach_id)
        .order_by(CoachStudentRequest.created_at.desc())
        .all()
    )


def list_requests_for_student(db: Session, principal: Principal) -> list[CoachStudentRequest]:
    student_id = principal.require_student_profile()
    return (
        db.query(CoachStudentRequest)
        .filter(CoachStudentRequest.student_id == student_id)
        .order_by(CoachStudentRequest.created_at.desc())
        .all()
    )
