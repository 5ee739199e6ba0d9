"""
Applicant and membership application models
"""

from dataclasses import asdict, dataclass
from typing import Dict, Optional

PENDING = "pending"
APPROVED = "approved"
DENIED = "denied"
APPLICATION_STATUSES = (PENDING, APPROVED, DENIED)


@dataclass(frozen=True)
class ApplicantInfo:
    """Details entered on the join form"""
    name: str
    usn: str
    email: str
    phone: str
    reason: str


@dataclass
class MembershipApplication:
    """Pending member record created once an applicant passes screening"""
    uid: str
    email: str
    name: str
    usn: Optional[str] = None
    phone: Optional[str] = None
    reason: Optional[str] = None
    role: str = "user"
    status: str = PENDING
    quiz_score: Optional[int] = None
    quiz_division: Optional[str] = None
    attempt_count: Optional[int] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "MembershipApplication":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
