"""
Shared utilities, config and dependencies for all API routes
"""

import logging
import os
from typing import List

from models.question import Question
from services.attempt_governor_service import ATTEMPT_LIMIT, AttemptGovernorService
from services.attempt_store import JsonFileAttemptStore
from services.data_loader_service import DataLoaderService
from services.enrollment_service import EnrollmentService
from services.exam_session_service import SESSION_RETENTION_SECONDS, ExamSessionService
from services.question_bank_service import QuestionBankService
from services.registration_service import (
    HttpRegistrationGateway,
    LocalRegistrationGateway,
    RegistrationGateway,
)

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Config
QUIZ_DB_FILE = os.getenv("QUIZ_DB_FILE", os.path.join(BASE_DIR, "data", "quiz_db.json"))
ATTEMPTS_FILE = os.getenv("ATTEMPTS_FILE", os.path.join(BASE_DIR, "var", "attempt_history.json"))
APPLICATIONS_FILE = os.getenv("APPLICATIONS_FILE", os.path.join(BASE_DIR, "var", "applications.json"))
QUIZ_ATTEMPTS_LOG = os.getenv("QUIZ_ATTEMPTS_LOG", os.path.join(BASE_DIR, "var", "quiz_attempts.jsonl"))
REGISTRATION_URL = os.getenv("REGISTRATION_URL", "")
REGISTRATION_TIMEOUT = float(os.getenv("REGISTRATION_TIMEOUT", "20"))
SESSION_RETENTION = int(os.getenv("SESSION_RETENTION_SECONDS", str(SESSION_RETENTION_SECONDS)))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Cache variables
_questions_cache = None
_question_bank = None
_governor = None
_sessions = None
_registration = None
_enrollment = None


def load_questions() -> List[Question]:
    """Load the question dataset (cached)"""
    global _questions_cache

    if _questions_cache is not None:
        return _questions_cache

    _questions_cache = DataLoaderService.load_questions(QUIZ_DB_FILE)
    return _questions_cache


def get_question_bank() -> QuestionBankService:
    """Dependency providing the QuestionBankService"""
    global _question_bank
    if _question_bank is None:
        _question_bank = QuestionBankService(load_questions())
    return _question_bank


def get_governor() -> AttemptGovernorService:
    """Dependency providing the AttemptGovernorService"""
    global _governor
    if _governor is None:
        store = JsonFileAttemptStore(ATTEMPTS_FILE, attempt_limit=ATTEMPT_LIMIT)
        _governor = AttemptGovernorService(store, attempt_limit=ATTEMPT_LIMIT)
    return _governor


def get_sessions() -> ExamSessionService:
    global _sessions
    if _sessions is None:
        _sessions = ExamSessionService(retention_seconds=SESSION_RETENTION)
    return _sessions


def get_registration() -> RegistrationGateway:
    """Dependency providing the registration gateway: HTTP when REGISTRATION_URL is set"""
    global _registration
    if _registration is None:
        if REGISTRATION_URL:
            logger.info("Forwarding registrations to %s", REGISTRATION_URL)
            _registration = HttpRegistrationGateway(REGISTRATION_URL, timeout=REGISTRATION_TIMEOUT)
        else:
            _registration = LocalRegistrationGateway(APPLICATIONS_FILE, QUIZ_ATTEMPTS_LOG)
    return _registration


def get_enrollment() -> EnrollmentService:
    """Dependency providing the EnrollmentService"""
    global _enrollment
    if _enrollment is None:
        _enrollment = EnrollmentService(
            bank=get_question_bank(),
            governor=get_governor(),
            sessions=get_sessions(),
            registration=get_registration(),
        )
    return _enrollment


def clear_cache():
    """Clear every cache - used by tests or to reload data"""
    global _questions_cache, _question_bank, _governor
    global _sessions, _registration, _enrollment

    _questions_cache = None
    _question_bank = None
    _governor = None
    _sessions = None
    _registration = None
    _enrollment = None
