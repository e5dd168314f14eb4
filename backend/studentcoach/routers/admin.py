"""Admin router — registration approval, directory, stats and coach reassignment."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studentcoach.database import get_db
from studentcoach.middleware.auth import require_admin
from studentcoach.models.enums import UserRole, UserStatus
from studentcoach.principal import Principal
from studentcoach.schemas.admin import (
    AdminUserResponse,
    ChangeCoachRequest,
    CoachChangeLogResponse,
    StatsResponse,
)
from studentcoach.schemas.auth import MessageResponse
from studentcoach.services import admin_service, approval_service, matching_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/pending-users", response_model=list[AdminUserResponse])
def pending_users(
    role: Optional[UserRole] = None,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Registrations waiting for a decision, newest first."""
    return [AdminUserResponse(**u) for u in approval_service.list_pending(db, role)]


@router.post("/users/{user_id}/approve", response_model=MessageResponse)
def approve_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    approval_service.approve(db, user_id, admin.user_id)
    return MessageResponse(message="User approved successfully")


@router.post("/users/{user_id}/reject", response_model=MessageResponse)
def reject_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    approval_service.reject(db, user_id, admin.user_id)
    return MessageResponse(message="User rejected successfully")


@router.get("/users", response_model=list[AdminUserResponse])
def list_users(
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return [AdminUserResponse(**u) for u in admin_service.list_users(db, role, status)]


@router.get("/stats", response_model=StatsResponse)
def stats(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return StatsResponse(**admin_service.get_stats(db))


@router.post("/students/{student_id}/change-coach", response_model=CoachChangeLogResponse)
def change_coach(
    student_id: str,
    req: ChangeCoachRequest,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Reassign a student's coach, bypassing the request flow. Logged."""
    log = matching_service.admin_reassign(db, student_id, req.new_coach_id, req.reason, admin.user_id)
    return CoachChangeLogResponse.model_validate(log)
