"""
Registration Service - hand-off of passed applicants to user registration
"""

import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence

import requests

from models.applicant import APPLICATION_STATUSES, PENDING, ApplicantInfo, MembershipApplication
from models.errors import ApplicantAlreadyRegistered, RegistrationError
from models.quiz_attempt_record import QuizAttemptRecord
from services.attempt_governor_service import utc_now

logger = logging.getLogger(__name__)


class RegistrationGateway(ABC):
    """
    Collaborator receiving applicants who passed screening.

    register() persists a QuizAttemptRecord and creates a pending
    membership application.
    """

    @abstractmethod
    def register(self,
                 applicant: ApplicantInfo,
                 division: str,
                 score: int,
                 answers: Sequence[int],
                 attempt_number: int,
                 passed: bool) -> MembershipApplication:
        ...

    @abstractmethod
    def list_applications(self, status: Optional[str] = None) -> List[MembershipApplication]:
        ...

    @abstractmethod
    def get_application(self, email: str) -> Optional[MembershipApplication]:
        ...

    @abstractmethod
    def set_status(self, email: str, status: str) -> MembershipApplication:
        ...


class LocalRegistrationGateway(RegistrationGateway):
    """
    File-backed registration: applications in a JSON file keyed by email,
    attempt records appended to a JSONL audit log.
    """

    def __init__(self,
                 applications_path: str,
                 attempts_path: str,
                 clock: Callable = utc_now):
        self.applications_path = applications_path
        self.attempts_path = attempts_path
        self.clock = clock
        self._lock = threading.Lock()

    def register(self, applicant, division, score, answers, attempt_number, passed):
        with self._lock:
            applications = self._load_applications()
            if applicant.email in applications:
                raise ApplicantAlreadyRegistered(applicant.email)

            uid = uuid.uuid4().hex
            application = MembershipApplication(
                uid=uid,
                email=applicant.email,
                name=applicant.name,
                usn=applicant.usn or None,
                phone=applicant.phone or None,
                reason=applicant.reason or None,
                status=PENDING,
                quiz_score=score,
                quiz_division=division,
                attempt_count=attempt_number,
            )
            record = QuizAttemptRecord(
                user_id=uid,
                user_email=applicant.email,
                attempt_number=attempt_number,
                answers=tuple(answers),
                score=score,
                division=division,
                passed=passed,
                timestamp=self.clock(),
            )

            # a failed audit append rolls the application back
            previous = dict(applications)
            applications[applicant.email] = application.to_dict()
            self._dump_applications(applications)
            try:
                self._append_record(record)
            except OSError as e:
                self._dump_applications(previous)
                raise RegistrationError(f"Could not write attempt record for {applicant.email}: {e}") from e

        logger.info("Registered pending application for %s (%s, score %d)",
                    applicant.email, division, score)
        return application

    def list_applications(self, status=None):
        with self._lock:
            applications = self._load_applications()
        result = [MembershipApplication.from_dict(a) for a in applications.values()]
        if status is not None:
            result = [a for a in result if a.status == status]
        return result

    def get_application(self, email):
        with self._lock:
            data = self._load_applications().get(email)
        return MembershipApplication.from_dict(data) if data else None

    def set_status(self, email, status):
        if status not in APPLICATION_STATUSES:
            raise ValueError(f"Unknown application status: {status}")
        with self._lock:
            applications = self._load_applications()
            if email not in applications:
                raise KeyError(email)
            applications[email]["status"] = status
            self._dump_applications(applications)
            application = MembershipApplication.from_dict(applications[email])
        logger.info("Application %s set to %s", email, status)
        return application

    def load_attempt_records(self) -> List[Dict]:
        if not os.path.exists(self.attempts_path):
            return []
        with open(self.attempts_path, 'r', encoding='utf-8') as f:
            return [json.loads(line) for line in f if line.strip()]

    def _append_record(self, record: QuizAttemptRecord) -> None:
        _ensure_parent(self.attempts_path)
        with open(self.attempts_path, 'a', encoding='utf-8') as f:
            f.write(json.dumps(record.to_dict()) + '\n')

    def _load_applications(self) -> Dict[str, Dict]:
        if not os.path.exists(self.applications_path):
            return {}
        try:
            with open(self.applications_path, 'r', encoding='utf-8') as f:
                applications = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Applications file %s unreadable, starting empty: %s", self.applications_path, e)
            return {}
        if not isinstance(applications, dict):
            logger.warning("Applications file %s is not an object, starting empty", self.applications_path)
            return {}
        return applications

    def _dump_applications(self, applications: Dict[str, Dict]) -> None:
        _ensure_parent(self.applications_path)
        tmp_path = f"{self.applications_path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(applications, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.applications_path)


class HttpRegistrationGateway(RegistrationGateway):
    """Forwards registrations to a remote user service over HTTP"""

    def __init__(self, base_url: str, timeout: float = 20.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = session or requests.Session()

    def register(self, applicant, division, score, answers, attempt_number, passed):
        payload = {
            "applicant": {
                "name": applicant.name,
                "usn": applicant.usn,
                "email": applicant.email,
                "phone": applicant.phone,
                "reason": applicant.reason,
            },
            "division": division,
            "score": score,
            "answers": list(answers),
            "attempt_number": attempt_number,
            "passed": passed,
        }
        response = self._request("POST", "/register", json=payload)
        if response.status_code == 409:
            raise ApplicantAlreadyRegistered(applicant.email)
        return MembershipApplication.from_dict(self._json(response))

    def list_applications(self, status=None):
        params = {"status": status} if status else None
        response = self._request("GET", "/applications", params=params)
        return [MembershipApplication.from_dict(a) for a in self._json(response)]

    def get_application(self, email):
        response = self._request("GET", f"/applications/{email}")
        if response.status_code == 404:
            return None
        return MembershipApplication.from_dict(self._json(response))

    def set_status(self, email, status):
        response = self._request("POST", f"/applications/{email}/status", json={"status": status})
        if response.status_code == 404:
            raise KeyError(email)
        return MembershipApplication.from_dict(self._json(response))

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return self.http.request(method, self.base_url + path, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("Registration service unreachable: %s", e)
            raise RegistrationError(f"Registration service unreachable: {e}") from e

    @staticmethod
    def _json(response: requests.Response):
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise RegistrationError(f"Registration service error: {e}") from e
        return response.json()


def _ensure_parent(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
