"""Tests for the coach-student matching workflow."""

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import pair, principal
from studentcoach.errors import BadRequestError, ForbiddenError, NotFoundError
from studentcoach.models import CoachChangeLog, CoachStudentRequest, RequestStatus, StudentProfile
from studentcoach.services import coach_service, matching_service


def _profile(db, user):
    db.expire_all()
    return db.query(StudentProfile).filter(StudentProfile.user_id == user.id).one()


def _request(db, request_id):
    db.expire_all()
    return db.query(CoachStudentRequest).filter(CoachStudentRequest.id == request_id).one()


class TestSendRequest:
    """Test coach-initiated requests."""

    def test_creates_pending_request(self, db, coach, student):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id, "Hi!")

        assert req.status is RequestStatus.PENDING
        assert req.coach_id == coach.coach_profile.id
        assert req.student_id == student.student_profile.id
        assert req.message == "Hi!"
        assert req.responded_at is None

    def test_unknown_student(self, db, coach):
        with pytest.raises(NotFoundError):
            matching_service.send_request(db, principal(coach), "missing")

    def test_student_with_coach(self, db, coach, coach_b, student):
        pair(db, student, coach_b)
        with pytest.raises(BadRequestError, match="already has a coach"):
            matching_service.send_request(db, principal(coach), student.student_profile.id)

    def test_duplicate_pending_request(self, db, coach, student):
        """A second pending request for the same pair is refused."""
        matching_service.send_request(db, principal(coach), student.student_profile.id)
        with pytest.raises(BadRequestError, match="pending request"):
            matching_service.send_request(db, principal(coach), student.student_profile.id)
        assert db.query(CoachStudentRequest).count() == 1

    def test_other_coaches_may_also_ask(self, db, coach, coach_b, student):
        """Pending requests from different coaches to one student coexist."""
        matching_service.send_request(db, principal(coach), student.student_profile.id)
        matching_service.send_request(db, principal(coach_b), student.student_profile.id)
        assert db.query(CoachStudentRequest).count() == 2

    def test_new_request_after_rejection(self, db, coach, student):
        """Once answered, the pair may get a fresh request."""
        first = matching_service.send_request(db, principal(coach), student.student_profile.id)
        matching_service.respond(db, principal(student), first.id, RequestStatus.REJECTED)

        second = matching_service.send_request(db, principal(coach), student.student_profile.id)
        assert second.status is RequestStatus.PENDING

    def test_caller_without_coach_profile(self, db, student, other_student):
        with pytest.raises(NotFoundError):
            matching_service.send_request(db, principal(student), other_student.student_profile.id)


class TestPendingUniqueIndex:
    """Test the database-level guard on open requests."""

    def test_index_rejects_second_pending_row(self, db, coach, student):
        for _ in range(2):
            db.add(CoachStudentRequest(
                coach_id=coach.coach_profile.id,
                student_id=student.student_profile.id,
                status=RequestStatus.PENDING,
            ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_index_allows_answered_rows(self, db, coach, student):
        for status in (RequestStatus.REJECTED, RequestStatus.REJECTED, RequestStatus.PENDING):
            db.add(CoachStudentRequest(
                coach_id=coach.coach_profile.id,
                student_id=student.student_profile.id,
                status=status,
            ))
        db.commit()
        assert db.query(CoachStudentRequest).count() == 3


class TestRespond:
    """Test student responses."""

    def test_accept_pairs_student(self, db, coach, student):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)

        result = matching_service.respond(db, principal(student), req.id, RequestStatus.ACCEPTED)

        assert result.status is RequestStatus.ACCEPTED
        assert result.responded_at is not None
        assert _profile(db, student).current_coach_id == coach.coach_profile.id

    def test_reject_only_touches_request(self, db, coach, student):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)

        result = matching_service.respond(db, principal(student), req.id, RequestStatus.REJECTED)

        assert result.status is RequestStatus.REJECTED
        assert result.responded_at is not None
        assert _profile(db, student).current_coach_id is None

    def test_unknown_request(self, db, student):
        with pytest.raises(NotFoundError):
            matching_service.respond(db, principal(student), "missing", RequestStatus.ACCEPTED)

    def test_someone_elses_request(self, db, coach, student, other_student):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)
        with pytest.raises(ForbiddenError):
            matching_service.respond(db, principal(other_student), req.id, RequestStatus.ACCEPTED)
        assert _request(db, req.id).status is RequestStatus.PENDING

    def test_request_is_terminal(self, db, coach, student):
        """An answered request cannot be answered again."""
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)
        matching_service.respond(db, principal(student), req.id, RequestStatus.REJECTED)

        with pytest.raises(BadRequestError, match="already responded"):
            matching_service.respond(db, principal(student), req.id, RequestStatus.ACCEPTED)
        assert _request(db, req.id).status is RequestStatus.REJECTED

    def test_pending_is_not_a_response(self, db, coach, student):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)
        with pytest.raises(BadRequestError, match="Invalid status"):
            matching_service.respond(db, principal(student), req.id, RequestStatus.PENDING)

    def test_second_offer_cannot_be_accepted(self, db, coach, coach_b, student):
        """After accepting one coach, another pending offer cannot also be accepted."""
        req_a = matching_service.send_request(db, principal(coach), student.student_profile.id)
        req_b = matching_service.send_request(db, principal(coach_b), student.student_profile.id)
        matching_service.respond(db, principal(student), req_a.id, RequestStatus.ACCEPTED)

        with pytest.raises(BadRequestError, match="already have a coach"):
            matching_service.respond(db, principal(student), req_b.id, RequestStatus.ACCEPTED)

        assert _request(db, req_b.id).status is RequestStatus.PENDING
        assert _profile(db, student).current_coach_id == coach.coach_profile.id

    def test_second_offer_can_still_be_rejected(self, db, coach, coach_b, student):
        req_a = matching_service.send_request(db, principal(coach), student.student_profile.id)
        req_b = matching_service.send_request(db, principal(coach_b), student.student_profile.id)
        matching_service.respond(db, principal(student), req_a.id, RequestStatus.ACCEPTED)

        result = matching_service.respond(db, principal(student), req_b.id, RequestStatus.REJECTED)
        assert result.status is RequestStatus.REJECTED


class TestAcceptAtomicity:
    """Accepting a request changes both rows or neither."""

    def test_fault_while_assigning_coach_rolls_back_request(self, db, coach, student, monkeypatch):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)

        def boom(*args, **kwargs):
            raise RuntimeError("simulated fault")

        monkeypatch.setattr(matching_service, "_assign_coach", boom)

        with pytest.raises(RuntimeError):
            matching_service.respond(db, principal(student), req.id, RequestStatus.ACCEPTED)

        stored = _request(db, req.id)
        assert stored.status is RequestStatus.PENDING
        assert stored.responded_at is None
        assert _profile(db, student).current_coach_id is None

    def test_fault_while_marking_request_leaves_coach_unset(self, db, coach, student, monkeypatch):
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)

        def boom(*args, **kwargs):
            raise RuntimeError("simulated fault")

        monkeypatch.setattr(matching_service, "_mark_responded", boom)

        with pytest.raises(RuntimeError):
            matching_service.respond(db, principal(student), req.id, RequestStatus.ACCEPTED)

        assert _request(db, req.id).status is RequestStatus.PENDING
        assert _profile(db, student).current_coach_id is None

    def test_coach_compare_and_swap(self, db, coach, coach_b, student):
        """The pairing write refuses to overwrite a coach that appeared after the read."""
        pair(db, student, coach_b)

        with pytest.raises(BadRequestError):
            matching_service._assign_coach(db, student.student_profile.id, None, coach.coach_profile.id)
        db.rollback()
        assert _profile(db, student).current_coach_id == coach_b.coach_profile.id

    def test_request_compare_and_swap(self, db, coach, student):
        """Marking a request answered only works while it is still pending."""
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)
        matching_service.respond(db, principal(student), req.id, RequestStatus.REJECTED)

        with pytest.raises(BadRequestError):
            matching_service._mark_responded(db, req.id, RequestStatus.ACCEPTED)
        db.rollback()
        assert _request(db, req.id).status is RequestStatus.REJECTED


class TestScenario:
    """End-to-end pairing scenario."""

    def test_accept_then_other_coach_is_refused(self, db, coach, coach_b, student):
        sid = student.student_profile.id

        req = matching_service.send_request(db, principal(coach), sid)
        assert req.status is RequestStatus.PENDING

        matching_service.respond(db, principal(student), req.id, RequestStatus.ACCEPTED)
        assert _request(db, req.id).status is RequestStatus.ACCEPTED
        assert _profile(db, student).current_coach_id == coach.coach_profile.id

        with pytest.raises(BadRequestError, match="already has a coach"):
            matching_service.send_request(db, principal(coach_b), sid)


class TestAdminReassign:
    """Test administrative coach changes."""

    def test_reassign_logs_and_swaps(self, db, admin, coach, coach_c, student):
        pair(db, student, coach)
        sid = student.student_profile.id

        log = matching_service.admin_reassign(db, sid, coach_c.coach_profile.id, "performance", admin.id)

        assert log.old_coach_id == coach.coach_profile.id
        assert log.new_coach_id == coach_c.coach_profile.id
        assert log.changed_by == admin.id
        assert log.reason == "performance"
        assert _profile(db, student).current_coach_id == coach_c.coach_profile.id
        assert db.query(CoachChangeLog).count() == 1

    def test_reassign_student_without_coach(self, db, admin, coach, student):
        log = matching_service.admin_reassign(db, student.student_profile.id, coach.coach_profile.id, "start", admin.id)
        assert log.old_coach_id is None
        assert _profile(db, student).current_coach_id == coach.coach_profile.id

    def test_unknown_student(self, db, admin, coach):
        with pytest.raises(NotFoundError, match="Student"):
            matching_service.admin_reassign(db, "missing", coach.coach_profile.id, "x", admin.id)

    def test_unknown_coach(self, db, admin, student):
        with pytest.raises(NotFoundError, match="Coach"):
            matching_service.admin_reassign(db, student.student_profile.id, "missing", "x", admin.id)
        assert db.query(CoachChangeLog).count() == 0

    def test_fault_rolls_back_log(self, db, admin, coach, coach_c, student, monkeypatch):
        """If the coach update fails, no audit row is left behind."""
        pair(db, student, coach)

        def boom(*args, **kwargs):
            raise RuntimeError("simulated fault")

        monkeypatch.setattr(matching_service, "_assign_coach", boom)

        with pytest.raises(RuntimeError):
            matching_service.admin_reassign(db, student.student_profile.id, coach_c.coach_profile.id, "x", admin.id)

        assert db.query(CoachChangeLog).count() == 0
        assert _profile(db, student).current_coach_id == coach.coach_profile.id

    def test_ignores_outstanding_requests(self, db, admin, coach, coach_b, student):
        """Pending requests are left as they are."""
        req = matching_service.send_request(db, principal(coach), student.student_profile.id)

        matching_service.admin_reassign(db, student.student_profile.id, coach_b.coach_profile.id, "x", admin.id)

        assert _request(db, req.id).status is RequestStatus.PENDING


class TestListsAndSearch:
    """Test request listings and the coach's student search."""

    def test_request_lists(self, db, coach, coach_b, student):
        matching_service.send_request(db, principal(coach), student.student_profile.id)
        matching_service.send_request(db, principal(coach_b), student.student_profile.id)

        assert len(matching_service.list_requests_for_coach(db, principal(coach))) == 1
        assert len(matching_service.list_requests_for_student(db, principal(student))) == 2

    def test_search_matches_name_and_email_case_insensitively(self, db, coach, student, other_student):
        assert [s.id for s in coach_service.search_students(db, "sara")] == [student.student_profile.id]
        assert [s.id for s in coach_service.search_students(db, "STUDENT.T@")] == [other_student.student_profile.id]

    def test_search_skips_paired_students(self, db, coach, student):
        pair(db, student, coach)
        assert coach_service.search_students(db, "sara") == []

    def test_my_students(self, db, coach, coach_b, student, other_student):
        pair(db, student, coach)
        pair(db, other_student, coach_b)
        assert [s.id for s in coach_service.my_students(db, principal(coach))] == [student.student_profile.id]
