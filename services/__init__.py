"""
Services module - Business logic
"""

from .question_bank_service import QuestionBankService
from .data_loader_service import DataLoaderService
from .attempt_store import AttemptStore, InMemoryAttemptStore, JsonFileAttemptStore
from .attempt_governor_service import AttemptGovernorService, AttemptStatus
from .scorer_service import ScorerService, GradeResult, UNANSWERED
from .exam_session_service import ExamSession, ExamSessionService
from .registration_service import RegistrationGateway, LocalRegistrationGateway, HttpRegistrationGateway
from .enrollment_service import EnrollmentService, ScreeningOutcome
from .analysis_service import AnalysisService

__all__ = [
    'QuestionBankService',
    'DataLoaderService',
    'AttemptStore',
    'InMemoryAttemptStore',
    'JsonFileAttemptStore',
    'AttemptGovernorService',
    'AttemptStatus',
    'ScorerService',
    'GradeResult',
    'UNANSWERED',
    'ExamSession',
    'ExamSessionService',
    'RegistrationGateway',
    'LocalRegistrationGateway',
    'HttpRegistrationGateway',
    'EnrollmentService',
    'ScreeningOutcome',
    'AnalysisService',
]
