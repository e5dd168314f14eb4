"""Tests for the admin approval workflow."""

from datetime import datetime

import pytest

from conftest import create_user
from studentcoach.errors import BadRequestError, InvalidStateError, NotFoundError
from studentcoach.models import User, UserRole, UserStatus
from studentcoach.services import admin_service, approval_service


class TestListPending:
    """Test the pending-registration listing."""

    def test_only_pending_newest_first(self, db, admin):
        """Approved and rejected users are excluded; newest registrations come first."""
        older = create_user(db, UserRole.COACH, status=UserStatus.PENDING)
        newer = create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)
        create_user(db, UserRole.STUDENT, status=UserStatus.REJECTED)
        older.created_at = datetime(2026, 1, 1)
        newer.created_at = datetime(2026, 1, 2)
        db.commit()

        pending = approval_service.list_pending(db)
        assert [p["id"] for p in pending] == [newer.id, older.id]

    def test_role_filter(self, db, admin):
        """Filtering by role narrows the list."""
        coach = create_user(db, UserRole.COACH, status=UserStatus.PENDING)
        create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)

        pending = approval_service.list_pending(db, UserRole.COACH)
        assert [p["id"] for p in pending] == [coach.id]

    def test_profile_fields_follow_role(self, db):
        """Coaches show bio, students show grade and parent phone."""
        coach = create_user(db, UserRole.COACH, status=UserStatus.PENDING, first_name="Ada")
        student = create_user(db, UserRole.STUDENT, status=UserStatus.PENDING, first_name="Sara")

        by_id = {p["id"]: p for p in approval_service.list_pending(db)}
        assert by_id[coach.id]["profile"]["first_name"] == "Ada"
        assert "bio" in by_id[coach.id]["profile"]
        assert "grade" not in by_id[coach.id]["profile"]
        assert by_id[student.id]["profile"]["grade"] == "8"
        assert "parent_phone" in by_id[student.id]["profile"]


class TestApprove:
    """Test PENDING -> APPROVED."""

    def test_approve_sets_status_and_audit_fields(self, db, admin):
        user = create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)

        approved = approval_service.approve(db, user.id, admin.id)

        assert approved.status is UserStatus.APPROVED
        assert approved.approved_by == admin.id
        assert approved.approved_at is not None

    def test_second_approve_fails(self, db, admin):
        """Approving twice fails InvalidState."""
        user = create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)
        approval_service.approve(db, user.id, admin.id)

        with pytest.raises(InvalidStateError):
            approval_service.approve(db, user.id, admin.id)

    def test_approve_after_reject_fails(self, db, admin):
        """A rejected user cannot be approved later."""
        user = create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)
        approval_service.reject(db, user.id, admin.id)

        with pytest.raises(InvalidStateError):
            approval_service.approve(db, user.id, admin.id)
        db.expire_all()
        assert db.query(User).filter(User.id == user.id).one().status is UserStatus.REJECTED

    def test_unknown_user(self, db, admin):
        with pytest.raises(NotFoundError):
            approval_service.approve(db, "missing", admin.id)

    def test_invalid_state_is_a_bad_request(self):
        """InvalidState maps to the same HTTP status as other business-rule failures."""
        assert issubclass(InvalidStateError, BadRequestError)
        assert InvalidStateError.status_code == 400


class TestReject:
    """Test PENDING -> REJECTED."""

    def test_reject_leaves_approved_at_unset(self, db, admin):
        user = create_user(db, UserRole.COACH, status=UserStatus.PENDING)

        rejected = approval_service.reject(db, user.id, admin.id)

        assert rejected.status is UserStatus.REJECTED
        assert rejected.approved_by == admin.id
        assert rejected.approved_at is None

    def test_second_reject_fails(self, db, admin):
        user = create_user(db, UserRole.COACH, status=UserStatus.PENDING)
        approval_service.reject(db, user.id, admin.id)

        with pytest.raises(InvalidStateError):
            approval_service.reject(db, user.id, admin.id)

    def test_reject_approved_user_fails(self, db, admin, coach):
        """An approved user never goes back."""
        with pytest.raises(InvalidStateError):
            approval_service.reject(db, coach.id, admin.id)

    def test_unknown_user(self, db, admin):
        with pytest.raises(NotFoundError):
            approval_service.reject(db, "missing", admin.id)


class TestAdminDirectory:
    """Test the admin user list and statistics."""

    def test_stats(self, db, admin, coach, student):
        create_user(db, UserRole.STUDENT, status=UserStatus.PENDING)

        stats = admin_service.get_stats(db)
        assert stats == {
            "total_users": 4,
            "pending_users": 1,
            "coaches": 1,
            "students": 2,
            "assignments": 0,
        }

    def test_list_users_filters(self, db, admin, coach, student):
        students = admin_service.list_users(db, role=UserRole.STUDENT)
        assert [u["id"] for u in students] == [student.id]
        assert students[0]["profile"]["current_coach_id"] is None

        approved = admin_service.list_users(db, status=UserStatus.APPROVED)
        assert {u["id"] for u in approved} == {admin.id, coach.id, student.id}
