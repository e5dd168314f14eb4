"""Coach router — dashboard, roster, student search and pairing requests."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studentcoach.database import get_db
from studentcoach.middleware.auth import require_coach
from studentcoach.principal import Principal
from studentcoach.routers.assignments import assignment_response
from studentcoach.schemas.profiles import (
    CoachRequestCreate,
    CoachRequestResponse,
    StudentProfileResponse,
)
from studentcoach.services import coach_service, matching_service

router = APIRouter(prefix="/api/coach", tags=["coach"])


@router.get("/dashboard")
def dashboard(
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    data = coach_service.dashboard(db, coach)
    return {
        "students": [StudentProfileResponse.model_validate(s) for s in data["students"]],
        "recent_assignments": [assignment_response(a) for a in data["recent_assignments"]],
        "upcoming_deadlines": [assignment_response(a) for a in data["upcoming_deadlines"]],
        "stats": {
            "total_students": data["total_students"],
            "total_assignments": data["total_assignments"],
        },
    }


@router.get("/students", response_model=list[StudentProfileResponse])
def my_students(
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    return coach_service.my_students(db, coach)


@router.get("/students/search", response_model=list[StudentProfileResponse])
def search_students(
    q: str = Query("", max_length=100),
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    """Approved students without a coach, matched on name or email."""
    return coach_service.search_students(db, q)


@router.post("/students/{student_id}/request", response_model=CoachRequestResponse, status_code=201)
def send_request(
    student_id: str,
    req: CoachRequestCreate,
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    return matching_service.send_request(db, coach, student_id, req.message)


@router.get("/requests", response_model=list[CoachRequestResponse])
def my_requests(
    db: Session = Depends(get_db),
    coach: Principal = Depends(require_coach),
):
    return matching_service.list_requests_for_coach(db, coach)
