"""Student router — profile, dashboard, coach requests, assignments and check-ins."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studentcoach.database import get_db
from studentcoach.middleware.auth import require_student
from studentcoach.principal import Principal
from studentcoach.routers.assignments import assignment_response
from studentcoach.schemas.assignment import (
    AssignmentResponse,
    CheckinCreate,
    CheckinResponse,
    ProgressReport,
    ProgressReportResponse,
)
from studentcoach.schemas.profiles import (
    CoachProfileResponse,
    CoachRequestRespond,
    CoachRequestResponse,
    StudentProfileResponse,
    StudentProfileUpdate,
)
from studentcoach.services import assignment_service, matching_service, student_service

router = APIRouter(prefix="/api/student", tags=["student"])


@router.get("/profile", response_model=StudentProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return student_service.get_profile(db, student)


@router.put("/profile", response_model=StudentProfileResponse)
def update_profile(
    req: StudentProfileUpdate,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return student_service.update_profile(db, student, req.model_dump(exclude_unset=True))


@router.get("/dashboard")
def dashboard(
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    data = student_service.dashboard(db, student)
    coach = data["current_coach"]
    return {
        "profile": StudentProfileResponse.model_validate(data["profile"]),
        "current_coach": CoachProfileResponse.model_validate(coach) if coach else None,
        "pending_requests": [CoachRequestResponse.model_validate(r) for r in data["pending_requests"]],
        "upcoming_assignments": [assignment_response(a) for a in data["upcoming_assignments"]],
    }


@router.get("/coach-requests", response_model=list[CoachRequestResponse])
def coach_requests(
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return matching_service.list_requests_for_student(db, student)


@router.post("/coach-requests/{request_id}/respond", response_model=CoachRequestResponse)
def respond_to_request(
    request_id: str,
    req: CoachRequestRespond,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    """Accept or reject a coach's request. Accepting pairs the student with the coach."""
    return matching_service.respond(db, student, request_id, req.status)


@router.get("/assignments", response_model=list[AssignmentResponse])
def my_assignments(
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return [assignment_response(a) for a in assignment_service.list_for_student(db, student)]


@router.post("/assignments/progress", response_model=ProgressReportResponse)
def report_progress(
    req: ProgressReport,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    row = assignment_service.report_progress(db, student, req.assignment_item_id, req.completed_count)
    return ProgressReportResponse(
        assignment_item_id=row.assignment_item_id,
        completed_count=row.completed_count,
    )


@router.post("/checkins", response_model=CheckinResponse, status_code=201)
def create_checkin(
    req: CheckinCreate,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return student_service.create_checkin(db, student, req.assignment_id, req.note)


@router.get("/checkins", response_model=list[CheckinResponse])
def list_checkins(
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    return student_service.list_checkins(db, student)
