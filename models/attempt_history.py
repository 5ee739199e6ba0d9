"""
AttemptHistory Model
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass
class AttemptHistory:
    """Screening attempts consumed by one applicant in the current cycle"""
    attempts: int = 0
    last_attempt_time: Optional[datetime] = None
    cooldown_until: Optional[datetime] = None

    def cooldown_expired(self, now: datetime) -> bool:
        return self.cooldown_until is not None and now > self.cooldown_until

    def to_dict(self) -> Dict:
        return {
            "attempts": self.attempts,
            "last_attempt_time": _format_time(self.last_attempt_time),
            "cooldown_until": _format_time(self.cooldown_until),
        }

    @classmethod
    def from_dict(cls, data: Dict, attempt_limit: int) -> "AttemptHistory":
        """
        Rebuild a history from its stored form

        Args:
            data: Dict produced by to_dict
            attempt_limit: Maximum attempts per cycle, used to validate the data

        Returns:
            AttemptHistory

        Raises:
            ValueError: if the data does not describe a reachable state
        """
        if not isinstance(data, dict):
            raise ValueError("Attempt history must be an object")

        attempts = data.get("attempts")
        if isinstance(attempts, bool) or not isinstance(attempts, int):
            raise ValueError(f"Invalid attempt count: {attempts!r}")
        if not 0 <= attempts <= attempt_limit:
            raise ValueError(f"Attempt count {attempts} outside [0, {attempt_limit}]")

        history = cls(
            attempts=attempts,
            last_attempt_time=_parse_time(data.get("last_attempt_time")),
            cooldown_until=_parse_time(data.get("cooldown_until")),
        )

        if (history.cooldown_until is not None) != (attempts == attempt_limit):
            raise ValueError("Cooldown must be set exactly when the attempt limit is reached")

        return history


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_time(value) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp without timezone: {value!r}")
    return parsed
