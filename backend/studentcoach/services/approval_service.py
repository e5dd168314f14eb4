"""Approval service — admin gate between registration and login."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from studentcoach.clock import utcnow
from studentcoach.errors import InvalidStateError, NotFoundError
from studentcoach.models.enums import UserRole, UserStatus
from studentcoach.models.user import User

logger = logging.getLogger(__name__)


def _profile_fields(user: User) -> Optional[dict]:
    """Profile columns an admin needs to judge a registration."""
    if user.role is UserRole.COACH:
        p = user.coach_profile
        if not p:
            return None
        return {
            "first_name": p.first_name,
            "last_name": p.last_name,
            "phone": p.phone,
            "bio": p.bio,
        }
    elif user.role is UserRole.STUDENT:
        p = user.student_profile
        if not p:
            return None
        return {
            "first_name": p.first_name,
            "last_name": p.last_name,
            "grade": p.grade,
            "phone": p.phone,
            "parent_phone": p.parent_phone,
        }
    elif user.role is UserRole.ADMIN:
        return None
    raise ValueError(f"Unhandled role {user.role!r}")


def list_pending(db: Session, role: Optional[UserRole] = None) -> list[dict]:
    """Pending registrations, newest first, optionally narrowed to one role."""
    query = db.query(User).filter(User.status == UserStatus.PENDING)
    if role:
        query = query.filter(User.role == role)
    users = query.order_by(User.created_at.desc()).all()

    return [
        {
            "id": u.id,
            "email": u.email,
            "role": u.role,
            "status": u.status,
            "created_at": u.created_at,
            "profile": _profile_fields(u),
        }
        for u in users
    ]


def _get_pending_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    if user.status is not UserStatus.PENDING:
        raise InvalidStateError("User is not pending approval")
    return user


def approve(db: Session, user_id: str, admin_id: str) -> User:
    """PENDING -> APPROVED."""
    user = _get_pending_user(db, user_id)
    user.status = UserStatus.APPROVED
    user.approved_at = utcnow()
    user.approved_by = admin_id
    db.commit()
    db.refresh(user)
    logger.info("User approved: user=%s admin=%s", user_id, admin_id)
    return user


def reject(db: Session, user_id: str, admin_id: str) -> User:
    """PENDING -> REJECTED. approved_at stays unset."""
    user = _get_pending_user(db, user_id)
    user.status = UserStatus.REJECTED
    user.approved_by = admin_id
    db.commit()
    db.refresh(user)
    logger.info("User rejected: user=%s admin=%s", user_id, admin_id)
    return user
