"""Password hashing, JWT signing and the authentication dependencies."""

import uuid
from datetime import timedelta
from functools import lru_cache

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from studentcoach.clock import utcnow
from studentcoach.config import settings
from studentcoach.database import get_db
from studentcoach.errors import BadRequestError, ForbiddenError, UnauthorizedError
from studentcoach.models.enums import UserRole
from studentcoach.models.user import User
from studentcoach.principal import Principal

security = HTTPBearer(auto_error=False)


# bcrypt only looks at the first 72 bytes; bcrypt>=5 raises on anything longer
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt directly (passlib is broken with bcrypt>=4.1)."""
    pwd_bytes = password.encode("utf-8")
    if len(pwd_bytes) > MAX_PASSWORD_BYTES:
        raise BadRequestError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Passwords longer than bcrypt accepts can never have been stored, so they
    are a mismatch. The hash is still checked to keep the timing uniform.
    """
    pwd_bytes = plain_password.encode("utf-8")
    too_long = len(pwd_bytes) > MAX_PASSWORD_BYTES
    matched = bcrypt.checkpw(
        pwd_bytes[:MAX_PASSWORD_BYTES],
        hashed_password.encode("utf-8"),
    )
    return matched and not too_long


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked for unknown emails so login timing does not reveal them."""
    return hash_password(uuid.uuid4().hex)


def _claims(user_id: str, email: str, role: UserRole) -> dict:
    return {
        "sub": user_id,
        "email": email,
        "role": role.value,
        "jti": str(uuid.uuid4()),
    }


def create_access_token(user_id: str, email: str, role: UserRole) -> str:
    to_encode = _claims(user_id, email, role)
    to_encode["exp"] = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(to_encode, settings.ACCESS_TOKEN_SECRET, algorithm=settings.ALGORITHM)


def create_refresh_token(user_id: str, email: str, role: UserRole) -> str:
    to_encode = _claims(user_id, email, role)
    to_encode["exp"] = utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return jwt.encode(to_encode, settings.REFRESH_TOKEN_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.ACCESS_TOKEN_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return Principal.from_user(user)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role is not UserRole.ADMIN:
        raise ForbiddenError("Admin role required")
    return principal


def require_coach(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role is not UserRole.COACH:
        raise ForbiddenError("Coach role required")
    return principal


def require_student(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role is not UserRole.STUDENT:
        raise ForbiddenError("Student role required")
    return principal


def require_coach_or_student(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role not in (UserRole.COACH, UserRole.STUDENT):
        raise ForbiddenError("Coach or student role required")
    return principal
