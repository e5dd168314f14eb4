"""Assignment service — lifecycle of coach-set assignments and item progress."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from studentcoach import progress
from studentcoach.clock import as_utc
from studentcoach.errors import BadRequestError, ForbiddenError, NotFoundError
from studentcoach.models.assignment import Assignment, AssignmentItem, AssignmentItemProgress
from studentcoach.models.enums import UserRole
from studentcoach.models.student_profile import StudentProfile
from studentcoach.principal import Principal

logger = logging.getLogger(__name__)

NO_ACCESS = "You do not have access to this assignment"


def _check_date_order(start_date: datetime, end_date: datetime) -> None:
    if as_utc(end_date) <= as_utc(start_date):
        raise BadRequestError("End date must be after start date")


def progress_summary(assignment: Assignment) -> dict:
    """Run the progress aggregator over a loaded assignment."""
    return progress.summarize(
        assignment.id,
        [
            progress.ItemCounts(
                item_id=item.id,
                question_count=item.question_count,
                completed_count=item.progress.completed_count if item.progress else None,
                subject=item.subject,
                topic=item.topic,
            )
            for item in assignment.items
        ],
    )


def create_assignment(
    db: Session,
    principal: Principal,
    student_id: str,
    start_date: datetime,
    end_date: datetime,
    items: list[dict],
) -> Assignment:
    """Create an assignment and its items for one of the coach's students.

    Each item dict carries subject, topic, question_count and optionally source.
    """
    coach_id = principal.require_coach_profile()

    student = db.query(StudentProfile).filter(StudentProfile.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found")

    # Binding is checked here only; later reassignment leaves old assignments alone
    if student.current_coach_id != coach_id:
        raise ForbiddenError("This student is not assigned to you")

    _check_date_order(start_date, end_date)

    assignment = Assignment(
        coach_id=coach_id,
        student_id=student_id,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
        items=[
            AssignmentItem(
                position=i,
                subject=item["subject"],
                topic=item["topic"],
                source=item.get("source"),
                question_count=item["question_count"],
            )
            for i, item in enumerate(items)
        ],
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(
        "Assignment created: assignment=%s coach=%s student=%s items=%d",
        assignment.id, coach_id, student_id, len(items),
    )
    return assignment


def _get_assignment(db: Session, assignment_id: str) -> Assignment:
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


def _get_readable(db: Session, principal: Principal, assignment_id: str) -> Assignment:
    """Load an assignment the caller may see: its coach or its student."""
    assignment = _get_assignment(db, assignment_id)

    if principal.role is UserRole.COACH:
        if not principal.coach_profile_id or assignment.coach_id != principal.coach_profile_id:
            raise ForbiddenError(NO_ACCESS)
    elif principal.role is UserRole.STUDENT:
        if not principal.student_profile_id or assignment.student_id != principal.student_profile_id:
            raise ForbiddenError(NO_ACCESS)
    elif principal.role is UserRole.ADMIN:
        raise ForbiddenError(NO_ACCESS)
    else:
        raise ForbiddenError(NO_ACCESS)
    return assignment


def _get_owned(db: Session, principal: Principal, assignment_id: str) -> Assignment:
    """Load an assignment the calling coach owns."""
    coach_id = principal.require_coach_profile()
    assignment = _get_assignment(db, assignment_id)
    if assignment.coach_id != coach_id:
        raise ForbiddenError(NO_ACCESS)
    return assignment


def get_assignment(db: Session, principal: Principal, assignment_id: str) -> Assignment:
    """Assignment with items, item progress and check-ins (newest first)."""
    return _get_readable(db, principal, assignment_id)


def get_progress(db: Session, principal: Principal, assignment_id: str) -> dict:
    return progress_summary(_get_readable(db, principal, assignment_id))


def update_assignment(
    db: Session,
    principal: Principal,
    assignment_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Assignment:
    """Move the assignment's dates. Items are never changed here.

    A single supplied date is checked against the stored other end.
    """
    assignment = _get_owned(db, principal, assignment_id)

    new_start = start_date if start_date is not None else assignment.start_date
    new_end = end_date if end_date is not None else assignment.end_date
    _check_date_order(new_start, new_end)

    if start_date is not None:
        assignment.start_date = as_utc(start_date)
    if end_date is not None:
        assignment.end_date = as_utc(end_date)
    db.commit()
    db.refresh(assignment)
    return assignment


def delete_assignment(db: Session, principal: Principal, assignment_id: str) -> None:
    """Hard delete; items and their progress go with it."""
    assignment = _get_owned(db, principal, assignment_id)
    db.delete(assignment)
    db.commit()
    logger.info("Assignment deleted: assignment=%s coach=%s", assignment_id, principal.coach_profile_id)


def list_for_coach(db: Session, principal: Principal, student_id: Optional[str] = None) -> list[Assignment]:
    coach_id = principal.require_coach_profile()
    query = db.query(Assignment).filter(Assignment.coach_id == coach_id)
    if student_id:
        query = query.filter(Assignment.student_id == student_id)
    return query.order_by(Assignment.end_date.desc()).all()


def list_for_student(db: Session, principal: Principal) -> list[Assignment]:
    student_id = principal.require_student_profile()
    return (
        db.query(Assignment)
        .filter(Assignment.student_id == student_id)
        .order_by(Assignment.end_date.desc())
        .all()
    )


def report_progress(
    db: Session,
    principal: Principal,
    assignment_item_id: str,
    completed_count: int,
) -> AssignmentItemProgress:
    """Student records how many questions of an item are done (upsert).

    completed_count may exceed the item's question_count.
    """
    student_id = principal.require_student_profile()

    item = db.query(AssignmentItem).filter(AssignmentItem.id == assignment_item_id).first()
    if not item:
        raise NotFoundError("Assignment item not found")
    if item.assignment.student_id != student_id:
        raise ForbiddenError("This assignment does not belong to you")

    row = (
        db.query(AssignmentItemProgress)
        .filter(AssignmentItemProgress.assignment_item_id == assignment_item_id)
        .first()
    )
    if row:
        row.completed_count = completed_count
    else:
        row = AssignmentItemProgress(
            assignment_item_id=assignment_item_id,
            completed_count=completed_count,
        )
        db.add(row)
    db.commit()
    db.refresh(row)
    return row
