"""Auth service — registration and the token authority (login, refresh, logout)."""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from studentcoach.clock import as_utc, utcnow
from studentcoach.config import settings
from studentcoach.errors import ConflictError, UnauthorizedError
from studentcoach.middleware.auth import (
    create_access_token,
    create_refresh_token,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from studentcoach.models.coach_profile import CoachProfile
from studentcoach.models.enums import UserRole, UserStatus
from studentcoach.models.refresh_token import RefreshToken
from studentcoach.models.student_profile import StudentProfile
from studentcoach.models.user import User

logger = logging.getLogger(__name__)

# Same message for unknown email, wrong password and unapproved account
INVALID_CREDENTIALS = "Invalid credentials"


def _ensure_email_free(db: Session, email: str) -> None:
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already exists")


def register_coach(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    bio: Optional[str] = None,
) -> User:
    """Create a PENDING coach together with its profile."""
    _ensure_email_free(db, email)

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=UserRole.COACH,
        status=UserStatus.PENDING,
    )
    user.coach_profile = CoachProfile(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        bio=bio,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Coach registered, awaiting approval: user=%s", user.id)
    return user


def register_student(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    grade: str,
    phone: Optional[str] = None,
    parent_phone: Optional[str] = None,
) -> User:
    """Create a PENDING student together with its profile."""
    _ensure_email_free(db, email)

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=UserRole.STUDENT,
        status=UserStatus.PENDING,
    )
    user.student_profile = StudentProfile(
        first_name=first_name,
        last_name=last_name,
        grade=grade,
        phone=phone,
        parent_phone=parent_phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Student registered, awaiting approval: user=%s", user.id)
    return user


def issue_tokens(user_id: str, email: str, role: UserRole) -> dict:
    """Mint an access/refresh pair over the same claims."""
    return {
        "access_token": create_access_token(user_id, email, role),
        "refresh_token": create_refresh_token(user_id, email, role),
    }


def login(db: Session, email: str, password: str) -> dict:
    """Authenticate an approved user and open a new refresh-token session.

    Unknown email, wrong password and a PENDING/REJECTED account all fail with
    the same UnauthorizedError.
    """
    user = db.query(User).filter(User.email == email).first()
    if not user:
        verify_password(password, dummy_password_hash())
        logger.warning("Login failed")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.warning("Login failed")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if user.status is not UserStatus.APPROVED:
        logger.warning("Login failed")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    tokens = issue_tokens(user.id, user.email, user.role)
    db.add(RefreshToken(
        token=tokens["refresh_token"],
        user_id=user.id,
        expires_at=utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    ))
    db.commit()
    logger.info("User logged in: user=%s", user.id)

    return {
        **tokens,
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "status": user.status,
        },
    }


def refresh(db: Session, refresh_token: str) -> dict:
    """Mint a new access token from a persisted, unexpired refresh token.

    The refresh token itself is not rotated, and the owner's approval status
    is not re-checked.
    """
    stored = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if not stored or as_utc(stored.expires_at) < utcnow():
        raise UnauthorizedError("Invalid or expired refresh token")

    user = stored.user
    return {"access_token": create_access_token(user.id, user.email, user.role)}


def logout(db: Session, user_id: str) -> int:
    """Revoke every refresh token of the user. Returns how many were removed."""
    deleted = (
        db.query(RefreshToken)
        .filter(RefreshToken.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("User logged out: user=%s revoked=%d", user_id, deleted)
    return deleted
