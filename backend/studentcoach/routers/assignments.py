"""Assignments router — create, read, update, delete and progress."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studentcoach.database import get_db
from studentcoach.middleware.auth import require_coach, require_coach_or_student
from studentcoach.models.assignment import Assignment
from studentcoach.principal import Principal
from studentcoach.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetailResponse,
    AssignmentItemResponse,
    AssignmentResponse,
    AssignmentUpdate,
    CheckinResponse,
    ProgressResponse,
)
from studentcoach.schemas.auth import MessageResponse
from studentcoach.services import assignment_service

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


def assignment_response(a: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=a.id,
        coach_id=a.coach_id,
        student_id=a.student_id,
        start_date=a.start_date,
        end_date=a.end_date,
        created_at=a.created_at,
        items=[
            AssignmentItemResponse(
                id=i.id,
                subject=i.subject,
                topic=i.topic,
                source=i.source,
                question_count=i.question_count,
                completed_count=i.progress.completed_count if i.progress else None,
            )
            for i in a.items
        ],
        progress=ProgressResponse(**assignment_service.progress_summary(a)),
    )


@router.post("", response_model=AssignmentResponse, status_code=201)
def create_assignment(
    req: AssignmentCreate,
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    """Create an assignment for one of the coach's students."""
    assignment = assignment_service.create_assignment(
        db,
        coach,
        req.student_id,
        req.start_date,
        req.end_date,
        [item.model_dump() for item in req.items],
    )
    return assignment_response(assignment)


@router.get("/coach/my-assignments", response_model=list[AssignmentResponse])
def my_assignments(
    student_id: Optional[str] = None,
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    return [assignment_response(a) for a in assignment_service.list_for_coach(db, coach, student_id)]


@router.get("/{assignment_id}", response_model=AssignmentDetailResponse)
def get_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_coach_or_student),
):
    a = assignment_service.get_assignment(db, principal, assignment_id)
    return AssignmentDetailResponse(
        **assignment_response(a).model_dump(),
        checkins=[CheckinResponse.model_validate(c) for c in a.checkins],
    )


@router.put("/{assignment_id}", response_model=AssignmentResponse)
def update_assignment(
    assignment_id: str,
    req: AssignmentUpdate,
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    a = assignment_service.update_assignment(db, coach, assignment_id, req.start_date, req.end_date)
    return assignment_response(a)


@router.delete("/{assignment_id}", response_model=MessageResponse)
def delete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    assignment_service.delete_assignment(db, coach, assignment_id)
    return MessageResponse(message="Assignment deleted successfully")


@router.get("/{assignment_id}/progress", response_model=ProgressResponse)
def assignment_progress(
    assignment_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_coach_or_student),
):
    return ProgressResponse(**assignment_service.get_progress(db, principal, assignment_id))
