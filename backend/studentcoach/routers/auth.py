"""Auth router — registration, login, token refresh, logout and user info."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from studentcoach.config import settings
from studentcoach.database import get_db
from studentcoach.middleware.auth import get_current_principal
from studentcoach.middleware.rate_limit import limiter
from studentcoach.models.user import User
from studentcoach.principal import Principal
from studentcoach.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PublicUser,
    RefreshRequest,
    RegisterCoachRequest,
    RegisterStudentRequest,
)
from studentcoach.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

PENDING_MESSAGE = "Registration successful. Waiting for admin approval."


@router.post("/register-coach", response_model=MessageResponse, status_code=201)
def register_coach(req: RegisterCoachRequest, db: Session = Depends(get_db)):
    """Register as a coach. The account stays PENDING until an admin approves it."""
    auth_service.register_coach(
        db,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        phone=req.phone,
        bio=req.bio,
    )
    return MessageResponse(message=PENDING_MESSAGE)


@router.post("/register-student", response_model=MessageResponse, status_code=201)
def register_student(req: RegisterStudentRequest, db: Session = Depends(get_db)):
    """Register as a student. The account stays PENDING until an admin approves it."""
    auth_service.register_student(
        db,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        grade=req.grade,
        phone=req.phone,
        parent_phone=req.parent_phone,
    )
    return MessageResponse(message=PENDING_MESSAGE)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Login and get an access/refresh token pair."""
    return LoginResponse(**auth_service.login(db, req.email, req.password))


@router.post("/refresh", response_model=AccessTokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def refresh(request: Request, req: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a stored refresh token for a new access token."""
    return AccessTokenResponse(**auth_service.refresh(db, req.refresh_token))


@router.post("/logout", response_model=MessageResponse)
def logout(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Revoke all refresh tokens of the current user."""
    auth_service.logout(db, principal.user_id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=PublicUser)
def get_me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Get current user info."""
    user = db.query(User).filter(User.id == principal.user_id).one()
    return PublicUser.model_validate(user)
