"""
Attempt history stores
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from models.attempt_history import AttemptHistory

logger = logging.getLogger(__name__)


class AttemptStore(ABC):
    """
    Storage of AttemptHistory keyed by applicant key (browser/device token).

    Entries that fail to parse are reported as absent, so a corrupted
    history falls back to a fresh one.
    """

    def __init__(self, attempt_limit: int):
        self.attempt_limit = attempt_limit

    def load(self, applicant_key: str) -> Optional[AttemptHistory]:
        raw = self._read(applicant_key)
        if raw is None:
            return None
        try:
            return AttemptHistory.from_dict(raw, self.attempt_limit)
        except ValueError as e:
            logger.warning("Discarding malformed attempt history for %s: %s", applicant_key, e)
            return None

    def save(self, applicant_key: str, history: AttemptHistory) -> None:
        self._write(applicant_key, history.to_dict())

    @abstractmethod
    def delete(self, applicant_key: str) -> None:
        ...

    @abstractmethod
    def _read(self, applicant_key: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def _write(self, applicant_key: str, data: Dict) -> None:
        ...


class InMemoryAttemptStore(AttemptStore):
    """Process-local store, used by tests and single-process deployments"""

    def __init__(self, attempt_limit: int):
        super().__init__(attempt_limit)
        self._entries: Dict[str, Dict] = {}
        self._lock = threading.Lock()

    def delete(self, applicant_key: str) -> None:
        with self._lock:
            self._entries.pop(applicant_key, None)

    def _read(self, applicant_key: str) -> Optional[Dict]:
        with self._lock:
            return self._entries.get(applicant_key)

    def _write(self, applicant_key: str, data: Dict) -> None:
        with self._lock:
            self._entries[applicant_key] = data


class JsonFileAttemptStore(AttemptStore):
    """
    Durable store kept in a single JSON file, survives restarts.
    Last write wins.
    """

    def __init__(self, path: str, attempt_limit: int):
        super().__init__(attempt_limit)
        self.path = path
        self._lock = threading.Lock()

    def delete(self, applicant_key: str) -> None:
        with self._lock:
            entries = self._load_file()
            if entries.pop(applicant_key, None) is not None:
                self._dump_file(entries)

    def _read(self, applicant_key: str) -> Optional[Dict]:
        with self._lock:
            return self._load_file().get(applicant_key)

    def _write(self, applicant_key: str, data: Dict) -> None:
        with self._lock:
            entries = self._load_file()
            entries[applicant_key] = data
            self._dump_file(entries)

    def _load_file(self) -> Dict[str, Dict]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Attempt store %s unreadable, starting empty: %s", self.path, e)
            return {}
        if not isinstance(entries, dict):
            logger.warning("Attempt store %s is not an object, starting empty", self.path)
            return {}
        return entries

    def _dump_file(self, entries: Dict[str, Dict]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(entries, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
