"""
Enrollment Service - screening flow from division choice to registration
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from models.applicant import ApplicantInfo, MembershipApplication
from models.division import get_division_config
from models.errors import AttemptsExhausted, RetryNotAllowed, SessionClosed, SessionInProgress
from services.attempt_governor_service import AttemptGovernorService
from services.exam_session_service import ExamSession, ExamSessionService
from services.question_bank_service import QuestionBankService
from services.registration_service import RegistrationGateway
from services.scorer_service import ScorerService

logger = logging.getLogger(__name__)


@dataclass
class ScreeningOutcome:
    """Admission decision of one graded attempt"""
    session_id: str
    division: str
    score: int
    passed: bool
    total_questions: int
    passing_score: int
    attempt_number: int
    attempts_left: int
    cooldown_until: Optional[datetime]
    forced: bool
    application: Optional[MembershipApplication] = None

    @property
    def retry_allowed(self) -> bool:
        return not self.passed and self.attempts_left > 0


class EnrollmentService:
    """
    Drives the join flow: draw an exam, grade it, consume an attempt and
    forward passing applicants to registration.

    Grading always uses the question set held by the server-side session,
    never a score reported by the client.
    """

    def __init__(self,
                 bank: QuestionBankService,
                 governor: AttemptGovernorService,
                 sessions: ExamSessionService,
                 registration: Optional[RegistrationGateway] = None,
                 scorer: Optional[ScorerService] = None):
        self.bank = bank
        self.governor = governor
        self.sessions = sessions
        self.registration = registration
        self.scorer = scorer or ScorerService()
        self._lock = threading.RLock()
        self.sessions.set_expiry_handler(self._on_session_expired)

    def start_screening(self,
                        applicant_key: str,
                        division: str,
                        applicant: ApplicantInfo) -> ExamSession:
        """
        Open a new exam for an applicant

        Args:
            applicant_key: Browser/device token of the applicant
            division: Division chosen by the applicant
            applicant: Join form details, registered on a pass

        Returns:
            The opened ExamSession

        Raises:
            InvalidDivision: unknown division
            SessionInProgress: the applicant already has an unfinished exam
            AttemptsExhausted: no attempts left in the current cycle
        """
        config = get_division_config(division)
        if applicant is None:
            raise ValueError("Join form details are required to start screening")

        with self._lock:
            running = self.sessions.find_open(applicant_key)
            if running is not None:
                if not running.is_expired(self.sessions.clock()):
                    raise SessionInProgress(running.session_id)
                # timer has not fired yet; grade it before opening another
                self.sessions.expire(running.session_id)

            status = self.governor.get_attempt_status(applicant_key)
            if status.attempts_left <= 0:
                raise AttemptsExhausted(status.cooldown_until)

            questions = self.bank.draw_questions(division)
            return self.sessions.open_session(
                applicant_key=applicant_key,
                division=division,
                questions=questions,
                time_limit_seconds=config.time_limit_seconds,
                applicant=applicant,
            )

    def retry_screening(self, session_id: str) -> ExamSession:
        """
        Start a fresh exam in the same division after a failed attempt

        Raises:
            SessionNotFound: unknown or evicted session
            RetryNotAllowed: the exam is not graded yet or was passed
            AttemptsExhausted: no attempts left in the current cycle
        """
        with self._lock:
            previous = self.sessions.get(session_id)
            if previous.grade is None:
                raise RetryNotAllowed(f"Exam session {session_id} has not been graded yet")
            if previous.grade.passed:
                raise RetryNotAllowed(f"Exam session {session_id} was already passed")

            session = self.start_screening(previous.applicant_key, previous.division, previous.applicant)
            self.sessions.discard(session_id)
            return session

    def abandon_screening(self, session_id: str) -> None:
        """
        Drop an unfinished exam. No attempt is consumed and nothing is recorded.

        Raises:
            SessionNotFound: unknown session
            SessionClosed: the exam was already submitted
        """
        with self._lock:
            session = self.sessions.get(session_id)
            if session.submitted:
                raise SessionClosed(f"Exam session {session_id} was already submitted")
            self.sessions.discard(session_id)
        logger.info("Exam session %s abandoned", session_id)

    def submit_screening(self,
                         session_id: str,
                         answers: Optional[Sequence[int]] = None) -> ScreeningOutcome:
        """
        Submit an exam and return the admission decision

        A session that was already submitted (e.g. by its timer) is not
        graded again; its stored result is returned.

        Args:
            session_id: Exam session
            answers: Full answer vector; None keeps the answers selected so far

        Returns:
            ScreeningOutcome

        Raises:
            AttemptsExhausted: the cycle has no attempt left to grade this exam
        """
        with self._lock:
            self.sessions.close(session_id, answers)
            return self._finalize(self.sessions.get(session_id))

    def get_outcome(self, session_id: str) -> Optional[ScreeningOutcome]:
        with self._lock:
            session = self.sessions.get(session_id)
            if session.grade is None:
                return None
            return self._build_outcome(session)

    def _on_session_expired(self, session: ExamSession) -> None:
        with self._lock:
            try:
                self._finalize(session)
            except Exception:
                logger.exception("Failed to finalize timed-out session %s", session.session_id)

    def _finalize(self, session: ExamSession) -> ScreeningOutcome:
        if session.grade is None:
            status = self.governor.get_attempt_status(session.applicant_key)
            if status.attempts_left <= 0:
                logger.warning("Refusing to grade session %s: no attempts left for %s",
                               session.session_id, session.applicant_key)
                self.sessions.discard(session.session_id)
                raise AttemptsExhausted(status.cooldown_until)

            session.grade = self.scorer.grade_attempt(session.division, session.questions, session.answers)
            history = self.governor.record_attempt(session.applicant_key)
            session.attempt_number = history.attempts
            logger.info("Session %s graded: %d/%d (%s), attempt %d",
                        session.session_id, session.grade.score, session.grade.total_questions,
                        "pass" if session.grade.passed else "fail", session.attempt_number)

        if session.grade.passed and session.application is None:
            self._register(session)

        return self._build_outcome(session)

    def _register(self, session: ExamSession) -> None:
        if self.registration is None:
            logger.info("Session %s passed, no registration gateway configured", session.session_id)
            return

        session.application = self.registration.register(
            applicant=session.applicant,
            division=session.division,
            score=session.grade.score,
            answers=list(session.answers),
            attempt_number=session.attempt_number,
            passed=True,
        )

    def _build_outcome(self, session: ExamSession) -> ScreeningOutcome:
        status = self.governor.get_attempt_status(session.applicant_key)
        return ScreeningOutcome(
            session_id=session.session_id,
            division=session.division,
            score=session.grade.score,
            passed=session.grade.passed,
            total_questions=session.grade.total_questions,
            passing_score=session.grade.passing_score,
            attempt_number=session.attempt_number,
            attempts_left=status.attempts_left,
            cooldown_until=status.cooldown_until,
            forced=session.forced,
            application=session.application,
        )
