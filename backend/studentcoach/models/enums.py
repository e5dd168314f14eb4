"""Closed value sets for roles and workflow states."""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    COACH = "COACH"
    STUDENT = "STUDENT"


class UserStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
