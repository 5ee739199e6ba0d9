"""
QuizAttemptRecord Model
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class QuizAttemptRecord:
    """Audit record of one screening attempt forwarded to registration"""
    user_email: str
    attempt_number: int
    answers: Tuple[int, ...]
    score: int
    division: str
    passed: bool
    timestamp: datetime
    user_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.answers, tuple):
            object.__setattr__(self, "answers", tuple(self.answers))

    def to_dict(self) -> Dict:
        return {
            "user_id": self.user_id,
            "user_email": self.user_email,
            "attempt_number": self.attempt_number,
            "answers": list(self.answers),
            "score": self.score,
            "division": self.division,
            "passed": self.passed,
            "timestamp": self.timestamp.isoformat(),
        }
