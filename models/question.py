"""
Question Model
"""

from dataclasses import dataclass
from typing import Tuple

from models.division import ALL_DIVISIONS
from models.errors import InvalidDivision

DIFFICULTIES = ("easy", "medium", "hard")


@dataclass(frozen=True)
class Question:
    """Catalog entry of the screening question bank"""
    question_id: str
    question: str
    options: Tuple[str, ...]
    correct_index: int
    division: str
    difficulty: str = "medium"

    def __post_init__(self):
        """
        Options are stored as a tuple so the bank cannot be mutated through
        a drawn question.
        """
        if not isinstance(self.options, tuple):
            object.__setattr__(self, "options", tuple(self.options))

        if len(self.options) < 2:
            raise ValueError(f"Question {self.question_id} needs at least two options")
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(
                f"Question {self.question_id}: correct index {self.correct_index} "
                f"out of range for {len(self.options)} options"
            )
        if self.division not in ALL_DIVISIONS:
            raise InvalidDivision(self.division)
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Question {self.question_id}: unknown difficulty {self.difficulty!r}")

    def is_correct(self, answer_index: int) -> bool:
        return answer_index == self.correct_index
