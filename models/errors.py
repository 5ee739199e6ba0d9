"""
Domain errors
"""

from datetime import datetime
from typing import Optional


class InvalidDivision(ValueError):
    """Division name is not one of the five recognized divisions"""

    def __init__(self, division):
        self.division = division
        super().__init__(f"Unknown division: {division!r}")


class AttemptsExhausted(Exception):
    """Applicant used every attempt and is inside the cooldown window"""

    def __init__(self, cooldown_until: Optional[datetime]):
        self.cooldown_until = cooldown_until
        until = cooldown_until.isoformat() if cooldown_until else "unknown"
        super().__init__(f"No screening attempts left until {until}")


class SessionNotFound(KeyError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self):
        return f"Exam session not found: {self.session_id}"


class SessionClosed(Exception):
    """Session was already submitted or its time ran out"""


class RegistrationError(Exception):
    """Registration collaborator rejected or failed the request"""


class ApplicantAlreadyRegistered(RegistrationError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An application already exists for {email}")


class SessionInProgress(Exception):
    """Applicant already has an unfinished exam open"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Exam session {session_id} is still in progress")


class RetryNotAllowed(Exception):
    """Retry requested for an exam that is unfinished or already passed"""
