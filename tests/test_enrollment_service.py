from datetime import timedelta

import pytest

from conftest import answers_with_correct
from models.applicant import PENDING
from models.errors import (
    ApplicantAlreadyRegistered,
    AttemptsExhausted,
    InvalidDivision,
    RetryNotAllowed,
    SessionClosed,
    SessionInProgress,
    SessionNotFound,
)
from services.enrollment_service import EnrollmentService


def test_aerodynamics_pass_registers_pending_member(enrollment, registration, applicant):
    session = enrollment.start_screening("device-1", "Aerodynamics", applicant)
    assert len(session.questions) == 25

    outcome = enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 16))

    assert outcome.score == 16
    assert outcome.passed
    assert outcome.attempt_number == 1
    assert outcome.attempts_left == 2
    assert not outcome.retry_allowed
    assert outcome.application is not None
    assert outcome.application.status == PENDING
    assert outcome.application.quiz_score == 16
    assert outcome.application.quiz_division == "Aerodynamics"

    records = registration.load_attempt_records()
    assert len(records) == 1
    assert records[0]["user_email"] == applicant.email
    assert records[0]["score"] == 16
    assert records[0]["passed"] is True
    assert records[0]["answers"] == answers_with_correct(session.questions, 16)
    assert records[0]["user_id"] == outcome.application.uid


def test_aerodynamics_fail_offers_retry_with_new_set(enrollment, registration, applicant):
    session = enrollment.start_screening("device-1", "Aerodynamics", applicant)

    outcome = enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 10))

    assert outcome.score == 10
    assert not outcome.passed
    assert outcome.attempts_left == 2
    assert outcome.cooldown_until is None
    assert outcome.retry_allowed
    assert outcome.application is None
    assert registration.load_attempt_records() == []

    retry = enrollment.retry_screening(session.session_id)
    assert retry.session_id != session.session_id
    assert retry.division == "Aerodynamics"
    assert len(retry.questions) == 25
    assert [q.question_id for q in retry.questions] != [q.question_id for q in session.questions]


def test_elite_three_failures_start_cooldown(enrollment, clock, applicant):
    outcome = None
    for _ in range(3):
        session = enrollment.start_screening("device-1", "Elite", applicant)
        assert len(session.questions) == 40
        outcome = enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 25))
        assert not outcome.passed

    assert outcome.attempt_number == 3
    assert outcome.attempts_left == 0
    assert outcome.cooldown_until == clock() + timedelta(hours=24)
    assert not outcome.retry_allowed

    with pytest.raises(AttemptsExhausted) as exc:
        enrollment.start_screening("device-1", "Elite", applicant)
    assert exc.value.cooldown_until == outcome.cooldown_until

    clock.advance(hours=24, minutes=1)
    session = enrollment.start_screening("device-1", "Elite", applicant)
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 3
    assert session.division == "Elite"


def test_score_is_graded_from_server_side_questions(enrollment, applicant):
    session = enrollment.start_screening("device-1", "Avionics", applicant)
    shown_order = list(session.questions)

    outcome = enrollment.submit_screening(session.session_id, [q.correct_index for q in shown_order])

    assert outcome.score == 25
    assert outcome.passed


def test_timer_expiry_grades_once(enrollment, sessions, timers, applicant, registration):
    session = enrollment.start_screening("device-1", "Propulsion", applicant)
    for position, q in enumerate(session.questions[:15]):
        sessions.select_answer(session.session_id, position, q.correct_index)

    timers.timers[-1].fire()

    assert session.grade is not None
    assert session.grade.score == 15
    assert session.application is not None
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 2

    outcome = enrollment.submit_screening(session.session_id, [q.correct_index for q in session.questions])
    assert outcome.forced
    assert outcome.score == 15
    assert outcome.passed
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 2
    assert len(registration.load_attempt_records()) == 1


def test_timer_expiry_with_no_answers_fails(enrollment, timers, applicant):
    session = enrollment.start_screening("device-1", "Structure", applicant)
    timers.timers[-1].fire()

    outcome = enrollment.get_outcome(session.session_id)
    assert outcome.score == 0
    assert not outcome.passed
    assert outcome.forced
    assert outcome.retry_allowed


def test_start_requires_applicant_details(enrollment, sessions):
    with pytest.raises(ValueError):
        enrollment.start_screening("device-1", "Structure", None)
    assert len(sessions) == 0
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 3


def test_duplicate_registration_still_consumes_attempt(enrollment, applicant):
    first = enrollment.start_screening("device-1", "Avionics", applicant)
    enrollment.submit_screening(first.session_id, [q.correct_index for q in first.questions])

    second = enrollment.start_screening("device-2", "Avionics", applicant)
    with pytest.raises(ApplicantAlreadyRegistered):
        enrollment.submit_screening(second.session_id, [q.correct_index for q in second.questions])
    assert enrollment.governor.get_attempt_status("device-2").attempts_left == 2


def test_get_outcome_before_grading_is_none(enrollment, applicant):
    session = enrollment.start_screening("device-1", "Avionics", applicant)
    assert enrollment.get_outcome(session.session_id) is None


def test_unknown_division_rejected(enrollment, applicant):
    with pytest.raises(InvalidDivision):
        enrollment.start_screening("device-1", "Chemistry", applicant)
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 3


def test_second_start_while_exam_open_is_refused(enrollment, applicant):
    first = enrollment.start_screening("device-1", "Aerodynamics", applicant)

    with pytest.raises(SessionInProgress) as exc:
        enrollment.start_screening("device-1", "Aerodynamics", applicant)
    assert exc.value.session_id == first.session_id
    with pytest.raises(SessionInProgress):
        enrollment.start_screening("device-1", "Elite", applicant)

    enrollment.submit_screening(first.session_id, answers_with_correct(first.questions, 10))
    second = enrollment.start_screening("device-1", "Aerodynamics", applicant)
    assert second.session_id != first.session_id


def test_start_grades_an_overdue_exam_before_opening_the_next(enrollment, clock, applicant):
    first = enrollment.start_screening("device-1", "Aerodynamics", applicant)
    clock.advance(minutes=31)

    second = enrollment.start_screening("device-1", "Aerodynamics", applicant)

    assert first.submitted and first.forced
    assert first.grade.score == 0
    assert first.attempt_number == 1
    assert second.session_id != first.session_id
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 2


def test_no_more_than_three_graded_attempts_per_cycle(enrollment, registration, applicant):
    attempt_numbers = []
    session = enrollment.start_screening("device-1", "Aerodynamics", applicant)
    for _ in range(3):
        outcome = enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 10))
        attempt_numbers.append(outcome.attempt_number)
        if outcome.retry_allowed:
            session = enrollment.retry_screening(session.session_id)

    assert attempt_numbers == [1, 2, 3]
    with pytest.raises(AttemptsExhausted):
        enrollment.retry_screening(session.session_id)
    with pytest.raises(AttemptsExhausted):
        enrollment.start_screening("device-1", "Aerodynamics", applicant)
    assert registration.load_attempt_records() == []


def test_exam_is_not_graded_once_the_cycle_is_used_up(enrollment, registration, applicant):
    session = enrollment.start_screening("device-1", "Aerodynamics", applicant)
    # attempts consumed elsewhere while this exam was open
    for _ in range(3):
        enrollment.governor.record_attempt("device-1")

    with pytest.raises(AttemptsExhausted):
        enrollment.submit_screening(session.session_id, [q.correct_index for q in session.questions])

    assert session.grade is None
    assert session.application is None
    assert registration.load_attempt_records() == []
    with pytest.raises(SessionNotFound):
        enrollment.get_outcome(session.session_id)


def test_retry_refused_for_open_or_passed_exam(enrollment, applicant):
    session = enrollment.start_screening("device-1", "Avionics", applicant)
    with pytest.raises(RetryNotAllowed):
        enrollment.retry_screening(session.session_id)

    enrollment.submit_screening(session.session_id, [q.correct_index for q in session.questions])
    with pytest.raises(RetryNotAllowed):
        enrollment.retry_screening(session.session_id)
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 2


def test_retry_drops_the_previous_session(enrollment, sessions, applicant):
    session = enrollment.start_screening("device-1", "Avionics", applicant)
    enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 3))

    retry = enrollment.retry_screening(session.session_id)

    with pytest.raises(SessionNotFound):
        sessions.get(session.session_id)
    assert sessions.get(retry.session_id) is retry


def test_abandon_leaves_no_record(enrollment, sessions, timers, registration, applicant):
    session = enrollment.start_screening("device-1", "Propulsion", applicant)
    sessions.select_answer(session.session_id, 0, session.questions[0].correct_index)

    enrollment.abandon_screening(session.session_id)

    assert timers.timers[-1].cancelled
    with pytest.raises(SessionNotFound):
        sessions.get(session.session_id)
    assert enrollment.governor.get_attempt_status("device-1").attempts_left == 3
    assert registration.load_attempt_records() == []

    fresh = enrollment.start_screening("device-1", "Propulsion", applicant)
    assert fresh.session_id != session.session_id


def test_abandon_after_submission_is_refused(enrollment, applicant):
    session = enrollment.start_screening("device-1", "Propulsion", applicant)
    enrollment.submit_screening(session.session_id, answers_with_correct(session.questions, 5))

    with pytest.raises(SessionClosed):
        enrollment.abandon_screening(session.session_id)
    assert enrollment.get_outcome(session.session_id).score == 5


def test_pass_without_gateway_is_not_registered(bank, governor, sessions, applicant):
    enrollment = EnrollmentService(bank=bank, governor=governor, sessions=sessions)
    session = enrollment.start_screening("device-1", "Structure", applicant)

    outcome = enrollment.submit_screening(session.session_id, [q.correct_index for q in session.questions])

    assert outcome.passed
    assert outcome.application is None
