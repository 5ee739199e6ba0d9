"""
Membership application API endpoints
Admin review of applicants who passed screening
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.schemas import MarksCardResponse, MembershipApplicationResponse
from api.shared import get_registration
from models.applicant import APPLICATION_STATUSES, APPROVED, DENIED
from models.errors import RegistrationError
from services.analysis_service import AnalysisService
from services.registration_service import RegistrationGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Membership Applications"])


@router.get("",
            response_model=List[MembershipApplicationResponse],
            summary="List membership applications")
async def list_applications(
    status: Optional[str] = Query(default=None, description="pending, approved or denied"),
    registration: RegistrationGateway = Depends(get_registration),
):
    if status is not None and status not in APPLICATION_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown application status: {status}")
    try:
        return [MembershipApplicationResponse(**a.to_dict()) for a in registration.list_applications(status)]
    except RegistrationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/{email}/marks-card",
            response_model=MarksCardResponse,
            summary="Exam performance of an applicant")
async def get_marks_card(
    email: str,
    registration: RegistrationGateway = Depends(get_registration),
):
    try:
        application = registration.get_application(email)
    except RegistrationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if application is None:
        raise HTTPException(status_code=404, detail=f"No application for {email}")
    if application.quiz_division is None:
        raise HTTPException(status_code=404, detail=f"No screening result for {email}")

    card = AnalysisService.build_marks_card(application.quiz_score or 0, application.quiz_division)
    return MarksCardResponse(
        email=application.email,
        name=application.name,
        status=application.status,
        **card,
    )


def _set_status(registration: RegistrationGateway, email: str, status: str) -> MembershipApplicationResponse:
    try:
        application = registration.set_status(email, status)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No application for {email}")
    except RegistrationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return MembershipApplicationResponse(**application.to_dict())


@router.post("/{email}/approve",
             response_model=MembershipApplicationResponse,
             summary="Approve a pending application")
async def approve_application(
    email: str,
    registration: RegistrationGateway = Depends(get_registration),
):
    return _set_status(registration, email, APPROVED)


@router.post("/{email}/deny",
             response_model=MembershipApplicationResponse,
             summary="Deny a pending application")
async def deny_application(
    email: str,
    registration: RegistrationGateway = Depends(get_registration),
):
    return _set_status(registration, email, DENIED)
