"""
Attempt Governor Service
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models.attempt_history import AttemptHistory
from services.attempt_store import AttemptStore

logger = logging.getLogger(__name__)

ATTEMPT_LIMIT = 3
COOLDOWN = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AttemptStatus:
    attempts_left: int
    cooldown_until: Optional[datetime] = None


class AttemptGovernorService:
    """
    Limits screening attempts per applicant.

    Behaves as a fixed-window rate limiter that expires by itself: the
    window opens when the attempt limit is reached and closes `cooldown`
    later. Expiry is evaluated on query, so reading the status of an
    expired window clears the stored history.
    """

    def __init__(self,
                 store: AttemptStore,
                 attempt_limit: int = ATTEMPT_LIMIT,
                 cooldown: timedelta = COOLDOWN,
                 clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.attempt_limit = attempt_limit
        self.cooldown = cooldown
        self.clock = clock

    def get_attempt_status(self, applicant_key: str) -> AttemptStatus:
        """
        Attempts left for an applicant and the cooldown deadline, if any

        Args:
            applicant_key: Browser/device token of the applicant

        Returns:
            AttemptStatus. A missing or corrupted history counts as fresh.
        """
        history = self._current_history(applicant_key)
        if history is None:
            return AttemptStatus(attempts_left=self.attempt_limit)

        if history.cooldown_until is not None:
            return AttemptStatus(attempts_left=0, cooldown_until=history.cooldown_until)

        return AttemptStatus(attempts_left=self.attempt_limit - history.attempts)

    def record_attempt(self, applicant_key: str) -> AttemptHistory:
        """
        Consume one attempt. Must be called exactly once per graded submission.

        Args:
            applicant_key: Browser/device token of the applicant

        Returns:
            The updated history
        """
        now = self.clock()
        history = self._current_history(applicant_key) or AttemptHistory()

        if history.attempts >= self.attempt_limit:
            # Caller ignored a blocked status; keep the running cooldown.
            logger.warning("Attempt recorded for blocked applicant %s", applicant_key)
            history.last_attempt_time = now
            self.store.save(applicant_key, history)
            return history

        history.attempts += 1
        history.last_attempt_time = now

        if history.attempts >= self.attempt_limit:
            history.cooldown_until = now + self.cooldown
            logger.info("Applicant %s reached the attempt limit, cooldown until %s",
                        applicant_key, history.cooldown_until.isoformat())

        self.store.save(applicant_key, history)
        return history

    def is_blocked(self, applicant_key: str) -> bool:
        return self.get_attempt_status(applicant_key).attempts_left == 0

    def _current_history(self, applicant_key: str) -> Optional[AttemptHistory]:
        history = self.store.load(applicant_key)
        if history is None:
            return None

        if history.cooldown_expired(self.clock()):
            logger.info("Cooldown expired for %s, attempts reset", applicant_key)
            self.store.delete(applicant_key)
            return None

        return history
