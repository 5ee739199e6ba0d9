import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
import pytest

from models.division import ELITE, STANDARD_DIVISIONS
from models.question import Question
from services.attempt_governor_service import AttemptGovernorService
from services.attempt_store import InMemoryAttemptStore
from services.enrollment_service import EnrollmentService
from services.exam_session_service import ExamSessionService
from services.question_bank_service import QuestionBankService
from services.registration_service import LocalRegistrationGateway

DIFFICULTY_CYCLE = ["easy", "medium", "hard"]


def make_question(question_id, division, difficulty="medium", correct_index=0, n_options=4):
    return Question(
        question_id=question_id,
        question=f"Question {question_id}?",
        options=tuple(f"Option {i}" for i in range(n_options)),
        correct_index=correct_index,
        division=division,
        difficulty=difficulty,
    )


def build_questions(per_division=30, elite=45):
    """Synthetic bank: every standard division plus an optional Elite pool"""
    questions = []
    for division in STANDARD_DIVISIONS:
        for i in range(per_division):
            questions.append(make_question(
                f"{division.lower()}-{i:03d}",
                division,
                DIFFICULTY_CYCLE[i % 3],
                correct_index=i % 4,
            ))
    for i in range(elite):
        questions.append(make_question(f"elite-{i:03d}", ELITE, "hard", correct_index=(i + 1) % 4))
    return questions


def answers_with_correct(questions, n_correct):
    """Answer vector with exactly n_correct right answers, the rest wrong"""
    answers = []
    for i, q in enumerate(questions):
        if i < n_correct:
            answers.append(q.correct_index)
        else:
            answers.append((q.correct_index + 1) % len(q.options))
    return answers


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeTimer:
    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def questions():
    return build_questions()


@pytest.fixture
def bank(questions):
    return QuestionBankService(questions, rng=np.random.default_rng(20260301))


@pytest.fixture
def store():
    return InMemoryAttemptStore(attempt_limit=3)


@pytest.fixture
def governor(store, clock):
    return AttemptGovernorService(store, attempt_limit=3, clock=clock)


@pytest.fixture
def sessions(clock, timers):
    return ExamSessionService(clock=clock, timer_factory=timers)


@pytest.fixture
def registration(tmp_path, clock):
    return LocalRegistrationGateway(
        applications_path=str(tmp_path / "applications.json"),
        attempts_path=str(tmp_path / "quiz_attempts.jsonl"),
        clock=clock,
    )


@pytest.fixture
def enrollment(bank, governor, sessions, registration):
    return EnrollmentService(bank=bank, governor=governor, sessions=sessions, registration=registration)


@pytest.fixture
def applicant():
    from models.applicant import ApplicantInfo
    return ApplicantInfo(
        name="Asha Rao",
        usn="1RV22AE014",
        email="asha@example.com",
        phone="+919876543210",
        reason="I want to build and fly fixed-wing UAVs with the club.",
    )
