"""Error taxonomy raised by the services.

Each error carries the HTTP status it maps to; the single exception handler
in ``studentcoach.main`` renders them as ``{"detail": ...}``.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for every business-rule failure."""

    status_code = 400
    headers: Optional[dict] = None

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""

    status_code = 404


class ForbiddenError(ServiceError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403


class BadRequestError(ServiceError):
    """Well-formed request that violates a business invariant."""

    status_code = 400


class InvalidStateError(BadRequestError):
    """Status transition attempted from the wrong state."""


class UnauthorizedError(ServiceError):
    """Missing, invalid or expired credential or token."""

    status_code = 401
    headers = {"WWW-Authenticate": "Bearer"}


class ConflictError(ServiceError):
    """Uniqueness conflict, e.g. an email that is already registered."""

    status_code = 409
