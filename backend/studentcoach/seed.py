"""Seed an approved admin, coach and student.

Run with ``python -m studentcoach.seed``. Existing accounts are left alone.
"""

import logging

from sqlalchemy.orm import Session

from studentcoach import models  # noqa: F401
from studentcoach.clock import utcnow
from studentcoach.config import settings
from studentcoach.database import Base, SessionLocal, engine
from studentcoach.logging_config import setup_logging
from studentcoach.middleware.auth import hash_password
from studentcoach.models.coach_profile import CoachProfile
from studentcoach.models.enums import UserRole, UserStatus
from studentcoach.models.student_profile import StudentProfile
from studentcoach.models.user import User

logger = logging.getLogger(__name__)

SEED_ACCOUNTS = [
    {
        "email": settings.SEED_ADMIN_EMAIL,
        "password": settings.SEED_ADMIN_PASSWORD,
        "role": UserRole.ADMIN,
    },
    {
        "email": settings.SEED_COACH_EMAIL,
        "password": settings.SEED_COACH_PASSWORD,
        "role": UserRole.COACH,
        "profile": {
            "first_name": "Ahmet",
            "last_name": "Yılmaz",
            "phone": "05551234567",
            "bio": "Experienced study coach",
        },
    },
    {
        "email": settings.SEED_STUDENT_EMAIL,
        "password": settings.SEED_STUDENT_PASSWORD,
        "role": UserRole.STUDENT,
        "profile": {
            "first_name": "Ayşe",
            "last_name": "Demir",
            "grade": "8",
            "phone": "05559876543",
            "parent_phone": "05551112233",
        },
    },
]


def ensure_account(db: Session, account: dict) -> User:
    """Get or create a seeded account; seeded accounts start APPROVED."""
    user = db.query(User).filter(User.email == account["email"]).first()
    if user:
        return user

    user = User(
        email=account["email"],
        password_hash=hash_password(account["password"]),
        role=account["role"],
        status=UserStatus.APPROVED,
        approved_at=utcnow(),
    )
    if account["role"] is UserRole.COACH:
        user.coach_profile = CoachProfile(**account["profile"])
    elif account["role"] is UserRole.STUDENT:
        user.student_profile = StudentProfile(**account["profile"])
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Seeded %s account %s", account["role"].value, user.email)
    return user


def main() -> None:
    setup_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for account in SEED_ACCOUNTS:
            ensure_account(db, account)
    finally:
        db.close()


if __name__ == "__main__":
    main()
