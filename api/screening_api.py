"""
Screening API endpoints
API for the join screening exam (divisions, attempt status, start, answer, submit)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from api.schemas import (
    AbandonScreeningResponse,
    AttemptStatusResponse,
    DivisionResponse,
    ExamQuestionResponse,
    ExamSessionResponse,
    MembershipApplicationResponse,
    QuestionBankStatsResponse,
    ScreeningOutcomeResponse,
    SelectAnswerRequest,
    SelectAnswerResponse,
    StartScreeningRequest,
    SubmitScreeningRequest,
)
from api.shared import get_enrollment, get_governor, get_question_bank
from models.division import DIVISION_CONFIGS, get_division_config
from models.errors import (
    ApplicantAlreadyRegistered,
    AttemptsExhausted,
    RegistrationError,
    RetryNotAllowed,
    SessionClosed,
    SessionInProgress,
    SessionNotFound,
)
from services.analysis_service import AnalysisService
from services.attempt_governor_service import AttemptGovernorService
from services.enrollment_service import EnrollmentService, ScreeningOutcome
from services.exam_session_service import ExamSession
from services.question_bank_service import QuestionBankService
from services.scorer_service import UNANSWERED

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/screening", tags=["Screening"])


def _session_response(session: ExamSession, attempts_left: int) -> ExamSessionResponse:
    config = get_division_config(session.division)
    return ExamSessionResponse(
        session_id=session.session_id,
        division=session.division,
        started_at=session.started_at,
        deadline=session.deadline,
        time_limit_seconds=config.time_limit_seconds,
        passing_score=config.passing_score,
        questions=[
            ExamQuestionResponse(
                position=i,
                question_id=q.question_id,
                question=q.question,
                options=list(q.options),
                difficulty=q.difficulty,
            )
            for i, q in enumerate(session.questions)
        ],
        attempts_left=attempts_left,
    )


def _outcome_response(outcome: ScreeningOutcome) -> ScreeningOutcomeResponse:
    if outcome.passed and outcome.application is not None:
        message = "Screening passed. Your membership request has been sent for admin approval."
    elif outcome.passed:
        message = "Screening passed. Your membership request has not been registered yet."
    elif outcome.retry_allowed:
        message = (f"You need at least {outcome.passing_score} correct answers to pass. "
                   f"{outcome.attempts_left} attempt(s) remaining.")
    else:
        message = "You have used all screening attempts. Try again after the cooldown."

    application = None
    if outcome.application is not None:
        application = MembershipApplicationResponse(**outcome.application.to_dict())

    return ScreeningOutcomeResponse(
        session_id=outcome.session_id,
        division=outcome.division,
        score=outcome.score,
        passed=outcome.passed,
        total_questions=outcome.total_questions,
        passing_score=outcome.passing_score,
        attempt_number=outcome.attempt_number,
        attempts_left=outcome.attempts_left,
        cooldown_until=outcome.cooldown_until,
        retry_allowed=outcome.retry_allowed,
        forced=outcome.forced,
        application=application,
        message=message,
    )


def _cooldown_detail(e: AttemptsExhausted) -> dict:
    return {
        "message": str(e),
        "cooldown_until": e.cooldown_until.isoformat() if e.cooldown_until else None,
    }


@router.get("/divisions",
            response_model=List[DivisionResponse],
            summary="Division exam policies")
async def list_divisions():
    return [
        DivisionResponse(
            division=c.division,
            passing_score=c.passing_score,
            total_questions=c.total_questions,
            time_limit_seconds=c.time_limit_seconds,
        )
        for c in DIVISION_CONFIGS.values()
    ]


@router.get("/status",
            response_model=AttemptStatusResponse,
            summary="Attempts left and cooldown of an applicant")
async def get_attempt_status(
    applicant_key: str = Query(..., min_length=1),
    governor: AttemptGovernorService = Depends(get_governor),
):
    """
    Called when the applicant enters screening and after each failed attempt.
    An expired cooldown is cleared by this call.
    """
    status = governor.get_attempt_status(applicant_key)
    return AttemptStatusResponse(
        applicant_key=applicant_key,
        attempts_left=status.attempts_left,
        cooldown_until=status.cooldown_until,
    )


@router.post("/start",
             response_model=ExamSessionResponse,
             summary="Draw a question set and start the timed exam")
async def start_screening(
    request: StartScreeningRequest,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    """
    Start a screening exam for the chosen division

    **The question set:**
    - Standard divisions: 25 random questions of that division
    - Elite: 40 questions from the dedicated Elite pool
    - Correct options are kept on the server
    """
    try:
        session = enrollment.start_screening(request.applicant_key, request.division, request.applicant.to_model())
        status = enrollment.governor.get_attempt_status(request.applicant_key)
        return _session_response(session, status.attempts_left)
    except SessionInProgress as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "session_id": e.session_id})
    except AttemptsExhausted as e:
        raise HTTPException(status_code=429, detail=_cooldown_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("Failed to start screening")
        raise HTTPException(status_code=500, detail=f"Failed to start screening: {str(e)}")


@router.post("/sessions/{session_id}/retry",
             response_model=ExamSessionResponse,
             summary="Start a new exam in the same division after a failed attempt")
async def retry_screening(
    session_id: str,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    try:
        session = enrollment.retry_screening(session_id)
        status = enrollment.governor.get_attempt_status(session.applicant_key)
        return _session_response(session, status.attempts_left)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RetryNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AttemptsExhausted as e:
        raise HTTPException(status_code=429, detail=_cooldown_detail(e))
    except Exception as e:
        logger.exception("Failed to retry screening")
        raise HTTPException(status_code=500, detail=f"Failed to retry screening: {str(e)}")


@router.put("/sessions/{session_id}/answers",
            response_model=SelectAnswerResponse,
            summary="Select the answer of one question")
async def select_answer(
    session_id: str,
    request: SelectAnswerRequest,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    try:
        session = enrollment.sessions.select_answer(session_id, request.position, request.option_index)
        return SelectAnswerResponse(
            session_id=session_id,
            answered=sum(1 for a in session.answers if a != UNANSWERED),
            total_questions=len(session.questions),
        )
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/sessions/{session_id}/submit",
             response_model=ScreeningOutcomeResponse,
             summary="Submit the exam and get the admission decision")
async def submit_screening(
    session_id: str,
    request: SubmitScreeningRequest,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    """
    Grade the exam on the server and consume one attempt

    - Pass: the applicant is forwarded to registration as a pending member
    - Fail: attempts left or the cooldown deadline are returned
    """
    try:
        outcome = enrollment.submit_screening(session_id, request.answers)
        return _outcome_response(outcome)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttemptsExhausted as e:
        raise HTTPException(status_code=429, detail=_cooldown_detail(e))
    except ApplicantAlreadyRegistered as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RegistrationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to submit screening")
        raise HTTPException(status_code=500, detail=f"Failed to submit screening: {str(e)}")


@router.delete("/sessions/{session_id}",
               response_model=AbandonScreeningResponse,
               summary="Abandon an unfinished exam without consuming an attempt")
async def abandon_screening(
    session_id: str,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    try:
        enrollment.abandon_screening(session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AbandonScreeningResponse(session_id=session_id, abandoned=True)


@router.get("/sessions/{session_id}/outcome",
            response_model=ScreeningOutcomeResponse,
            summary="Decision of an already graded exam (e.g. after the timer ran out)")
async def get_outcome(
    session_id: str,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    try:
        outcome = enrollment.get_outcome(session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    if outcome is None:
        raise HTTPException(status_code=409, detail="Exam session has not been graded yet")
    return _outcome_response(outcome)


@router.get("/questions/stats",
            response_model=QuestionBankStatsResponse,
            summary="Question bank counts by division and difficulty")
async def get_question_stats(bank: QuestionBankService = Depends(get_question_bank)):
    return AnalysisService.analyze_bank(bank.all_questions())
