"""Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database built from the ORM
metadata, so nothing leaks between tests.
"""

import os
import sys
import uuid

# Settings are read at import time; configure them before anything imports studentcoach.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studentcoach import models  # noqa: F401
from studentcoach.clock import utcnow
from studentcoach.database import Base
from studentcoach.middleware.auth import hash_password
from studentcoach.models import CoachProfile, StudentProfile, User, UserRole, UserStatus
from studentcoach.principal import Principal

DEFAULT_PASSWORD = "Passw0rd!"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def create_user(
    db,
    role: UserRole,
    status: UserStatus = UserStatus.APPROVED,
    email: str = None,
    password: str = DEFAULT_PASSWORD,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    """Insert a user (and its profile) directly, bypassing registration."""
    user = User(
        email=email or f"{role.value.lower()}_{uuid.uuid4().hex[:8]}@example.com",
        password_hash=hash_password(password),
        role=role,
        status=status,
        approved_at=utcnow() if status is UserStatus.APPROVED else None,
    )
    if role is UserRole.COACH:
        user.coach_profile = CoachProfile(first_name=first_name, last_name=last_name)
    elif role is UserRole.STUDENT:
        user.student_profile = StudentProfile(first_name=first_name, last_name=last_name, grade="8")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return create_user(db, UserRole.ADMIN, email="admin@example.com")


@pytest.fixture
def coach(db):
    return create_user(db, UserRole.COACH, email="coach.a@example.com", first_name="Ada", last_name="Coach")


@pytest.fixture
def coach_b(db):
    return create_user(db, UserRole.COACH, email="coach.b@example.com", first_name="Ben", last_name="Coach")


@pytest.fixture
def coach_c(db):
    return create_user(db, UserRole.COACH, email="coach.c@example.com", first_name="Cem", last_name="Coach")


@pytest.fixture
def student(db):
    return create_user(db, UserRole.STUDENT, email="student.s@example.com", first_name="Sara", last_name="Student")


@pytest.fixture
def other_student(db):
    return create_user(db, UserRole.STUDENT, email="student.t@example.com", first_name="Tom", last_name="Pupil")


def principal(user: User) -> Principal:
    return Principal.from_user(user)


def pair(db, student_user: User, coach_user: User) -> None:
    """Set the pairing directly."""
    student_user.student_profile.current_coach_id = coach_user.coach_profile.id
    db.commit()
