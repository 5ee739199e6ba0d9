"""
Exam Session Service - timed screening exams
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from models.applicant import ApplicantInfo
from models.errors import SessionClosed, SessionNotFound
from models.question import Question
from services.attempt_governor_service import utc_now
from services.scorer_service import UNANSWERED

logger = logging.getLogger(__name__)

# How long a submitted session is kept for outcome and retry requests
SESSION_RETENTION_SECONDS = 3600


@dataclass
class ExamSession:
    """One started exam: the drawn questions and the answers selected so far"""
    session_id: str
    applicant_key: str
    division: str
    questions: List[Question]
    started_at: datetime
    deadline: datetime
    answers: List[int]
    applicant: Optional[ApplicantInfo] = None
    submitted: bool = False
    forced: bool = False
    closed_at: Optional[datetime] = None
    # filled in by the enrollment flow once graded
    grade: Optional[Any] = None
    attempt_number: Optional[int] = None
    application: Optional[Any] = None
    timer: Optional[Any] = field(default=None, repr=False)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.deadline


class ExamSessionService:
    """
    In-memory registry of running exams.

    Each session gets a one-shot timer; when it fires the session is
    closed with whatever answers are selected and the expiry handler runs.
    """

    def __init__(self,
                 clock: Callable[[], datetime] = utc_now,
                 timer_factory: Optional[Callable[..., Any]] = threading.Timer,
                 retention_seconds: int = SESSION_RETENTION_SECONDS):
        self.clock = clock
        self.timer_factory = timer_factory
        self.retention = timedelta(seconds=retention_seconds)
        self._sessions: Dict[str, ExamSession] = {}
        self._lock = threading.RLock()
        self._expiry_handler: Optional[Callable[[ExamSession], None]] = None

    def set_expiry_handler(self, handler: Callable[[ExamSession], None]) -> None:
        self._expiry_handler = handler

    def open_session(self,
                     applicant_key: str,
                     division: str,
                     questions: Sequence[Question],
                     time_limit_seconds: int,
                     applicant: Optional[ApplicantInfo] = None) -> ExamSession:
        now = self.clock()
        session = ExamSession(
            session_id=uuid.uuid4().hex,
            applicant_key=applicant_key,
            division=division,
            questions=list(questions),
            started_at=now,
            deadline=now + timedelta(seconds=time_limit_seconds),
            answers=[UNANSWERED] * len(questions),
            applicant=applicant,
        )

        with self._lock:
            self.evict_closed()
            self._sessions[session.session_id] = session

        if self.timer_factory is not None:
            timer = self.timer_factory(time_limit_seconds, self.expire, args=(session.session_id,))
            timer.daemon = True
            session.timer = timer
            timer.start()

        logger.info("Opened exam session %s (%s, %d questions)",
                    session.session_id, division, len(session.questions))
        return session

    def get(self, session_id: str) -> ExamSession:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise SessionNotFound(session_id) from None

    def select_answer(self, session_id: str, position: int, option_index: int) -> ExamSession:
        """
        Record the option selected for one question

        Args:
            session_id: Exam session
            position: Index of the question in the drawn set
            option_index: Selected option, or UNANSWERED to clear

        Raises:
            SessionNotFound: unknown session
            SessionClosed: session submitted or past its deadline
            ValueError: position or option out of range
        """
        with self._lock:
            session = self.get(session_id)
            if session.submitted or session.is_expired(self.clock()):
                raise SessionClosed(f"Exam session {session_id} is closed")
            if not 0 <= position < len(session.questions):
                raise ValueError(f"Question position {position} out of range")
            if option_index != UNANSWERED and not 0 <= option_index < len(session.questions[position].options):
                raise ValueError(f"Option {option_index} out of range for question {position}")

            session.answers[position] = option_index
            return session

    def close(self, session_id: str, answers: Optional[Sequence[int]] = None) -> bool:
        """
        Mark a session as submitted

        Answers given explicitly replace the selected ones only while the
        session is still within its time limit; after the deadline the
        answers selected in time are kept.

        Returns:
            True if this call closed the session, False if it was already closed

        Raises:
            ValueError: more answers than questions or an option out of range
        """
        with self._lock:
            session = self.get(session_id)
            if session.submitted:
                return False

            if answers is not None and not session.is_expired(self.clock()):
                if len(answers) > len(session.questions):
                    raise ValueError(
                        f"Got {len(answers)} answers for {len(session.questions)} questions"
                    )
                for position, option_index in enumerate(answers):
                    if option_index != UNANSWERED and not 0 <= option_index < len(session.questions[position].options):
                        raise ValueError(f"Option {option_index} out of range for question {position}")
                session.answers = list(answers) + [UNANSWERED] * (len(session.questions) - len(answers))
            elif answers is not None:
                session.forced = True
                logger.info("Late submission for session %s, keeping answers selected in time", session_id)

            session.submitted = True
            session.closed_at = self.clock()
            if session.timer is not None:
                session.timer.cancel()
            return True

    def expire(self, session_id: str) -> None:
        """Timer callback: force the submission of an unfinished session"""
        with self._lock:
            try:
                session = self.get(session_id)
            except SessionNotFound:
                return
            if session.submitted:
                return
            session.forced = True
            self.close(session_id)

        logger.info("Exam session %s timed out, submitted automatically", session_id)
        if self._expiry_handler is not None:
            self._expiry_handler(session)

    def discard(self, session_id: str) -> None:
        """Drop an abandoned session without recording anything"""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None and session.timer is not None:
            session.timer.cancel()

    def find_open(self, applicant_key: str) -> Optional[ExamSession]:
        """The unsubmitted session of an applicant, if any"""
        with self._lock:
            for session in self._sessions.values():
                if session.applicant_key == applicant_key and not session.submitted:
                    return session
        return None

    def evict_closed(self) -> int:
        """
        Drop submitted sessions older than the retention period

        Returns:
            Number of sessions dropped
        """
        cutoff = self.clock() - self.retention
        with self._lock:
            stale = [sid for sid, s in self._sessions.items()
                     if s.submitted and s.closed_at is not None and s.closed_at <= cutoff]
            for sid in stale:
                del self._sessions[sid]
        if stale:
            logger.info("Evicted %d closed exam sessions", len(stale))
        return len(stale)

    def __len__(self):
        with self._lock:
            return len(self._sessions)
