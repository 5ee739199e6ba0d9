"""
Pydantic schemas for the API
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, conint

from models.applicant import ApplicantInfo

# Upper bound of a submitted option index; larger values cannot match any question
MAX_OPTION_INDEX = 99


class DivisionResponse(BaseModel):
    """Exam policy of one division"""
    division: str
    passing_score: int
    total_questions: int
    time_limit_seconds: int


class AttemptStatusResponse(BaseModel):
    applicant_key: str
    attempts_left: int = Field(..., description="Attempts left in the current cycle")
    cooldown_until: Optional[datetime] = Field(
        default=None,
        description="When attempts become available again (only when none are left)",
    )


class ApplicantInfoSchema(BaseModel):
    """Join form details"""
    name: str = Field(..., min_length=2, description="Full name")
    usn: str = Field(..., min_length=5, description="University seat number")
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str = Field(..., pattern=r"^\+?[1-9]\d{9,14}$")
    reason: str = Field(..., min_length=20, description="Why the applicant wants to join")

    def to_model(self) -> ApplicantInfo:
        return ApplicantInfo(
            name=self.name,
            usn=self.usn,
            email=self.email,
            phone=self.phone,
            reason=self.reason,
        )


class StartScreeningRequest(BaseModel):
    """Request to start a screening exam"""
    applicant_key: str = Field(..., min_length=1, description="Browser/device token of the applicant")
    division: str = Field(..., description="Aerodynamics, Avionics, Propulsion, Structure or Elite")
    applicant: ApplicantInfoSchema = Field(..., description="Join form details, registered on a pass")

    class Config:
        json_schema_extra = {
            "example": {
                "applicant_key": "device-7f3a9c",
                "division": "Aerodynamics",
                "applicant": {
                    "name": "Asha Rao",
                    "usn": "1RV22AE014",
                    "email": "asha@example.com",
                    "phone": "+919876543210",
                    "reason": "I want to build and fly fixed-wing UAVs with the club.",
                },
            }
        }


class ExamQuestionResponse(BaseModel):
    """Question as shown to the applicant; the correct option is never sent"""
    position: int
    question_id: str
    question: str
    options: List[str]
    difficulty: str


class ExamSessionResponse(BaseModel):
    session_id: str
    division: str
    started_at: datetime
    deadline: datetime
    time_limit_seconds: int
    passing_score: int
    questions: List[ExamQuestionResponse]
    attempts_left: int


class SelectAnswerRequest(BaseModel):
    position: int = Field(..., ge=0)
    option_index: int = Field(..., ge=-1, le=MAX_OPTION_INDEX, description="-1 clears the selection")


class SelectAnswerResponse(BaseModel):
    session_id: str
    answered: int
    total_questions: int


class SubmitScreeningRequest(BaseModel):
    """Submission of an exam; omit answers to submit the ones selected so far"""
    answers: Optional[List[conint(ge=-1, le=MAX_OPTION_INDEX)]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "answers": [1, 0, 2, -1, 3],
            }
        }


class MembershipApplicationResponse(BaseModel):
    uid: str
    email: str
    name: str
    usn: Optional[str] = None
    phone: Optional[str] = None
    reason: Optional[str] = None
    role: str
    status: str
    quiz_score: Optional[int] = None
    quiz_division: Optional[str] = None
    attempt_count: Optional[int] = None


class ScreeningOutcomeResponse(BaseModel):
    """Admission decision of a graded attempt"""
    session_id: str
    division: str
    score: int
    passed: bool
    total_questions: int
    passing_score: int
    attempt_number: int
    attempts_left: int
    cooldown_until: Optional[datetime] = None
    retry_allowed: bool
    forced: bool = Field(..., description="True when the exam was submitted by its timer")
    application: Optional[MembershipApplicationResponse] = None
    message: str


class DivisionBankStatistics(BaseModel):
    total: int
    by_difficulty: Dict[str, int]
    required: int
    sufficient: bool


class OptionStatistics(BaseModel):
    min: int
    max: int
    mean: float


class QuestionBankStatsResponse(BaseModel):
    total_questions: int
    by_division: Dict[str, DivisionBankStatistics]
    options: OptionStatistics


class MarksCardResponse(BaseModel):
    """Exam performance of an applicant, for admin review"""
    email: str
    name: str
    division: str
    total_questions: int
    correct: int
    wrong: int
    percentage: int
    passing_score: int
    passed: bool
    status: str


class AbandonScreeningResponse(BaseModel):
    session_id: str
    abandoned: bool
