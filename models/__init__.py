"""
Models module - screening data classes
"""

from .errors import (
    InvalidDivision,
    AttemptsExhausted,
    SessionNotFound,
    SessionClosed,
    SessionInProgress,
    RetryNotAllowed,
    RegistrationError,
    ApplicantAlreadyRegistered,
)
from .division import DivisionConfig, DIVISION_CONFIGS, get_division_config
from .question import Question
from .attempt_history import AttemptHistory
from .quiz_attempt_record import QuizAttemptRecord
from .applicant import ApplicantInfo, MembershipApplication

__all__ = [
    'InvalidDivision',
    'AttemptsExhausted',
    'SessionNotFound',
    'SessionClosed',
    'SessionInProgress',
    'RetryNotAllowed',
    'RegistrationError',
    'ApplicantAlreadyRegistered',
    'DivisionConfig',
    'DIVISION_CONFIGS',
    'get_division_config',
    'Question',
    'AttemptHistory',
    'QuizAttemptRecord',
    'ApplicantInfo',
    'MembershipApplication',
]
