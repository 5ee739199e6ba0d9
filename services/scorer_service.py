"""
Scorer Service
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from models.division import get_division_config
from models.question import Question

UNANSWERED = -1


@dataclass(frozen=True)
class GradeResult:
    score: int
    passed: bool
    total_questions: int
    passing_score: int


class ScorerService:
    """
    Service to grade a submitted screening exam
    """

    @staticmethod
    def grade_attempt(division: str,
                      questions: Sequence[Question],
                      answers: Sequence[int]) -> GradeResult:
        """
        Grade an answer vector against the drawn question set

        One point per correct answer, no partial credit, no penalty. Blank
        (UNANSWERED), out-of-range and missing trailing answers score 0.

        Args:
            division: Division of the exam
            questions: Question set in the order it was shown
            answers: Selected option index per position

        Returns:
            GradeResult with score and pass flag

        Raises:
            InvalidDivision: if the division is not recognized
            ValueError: if there are more answers than questions or an index overflows
        """
        config = get_division_config(division)

        if len(answers) > len(questions):
            raise ValueError(
                f"Got {len(answers)} answers for {len(questions)} questions"
            )

        padded = np.full(len(questions), UNANSWERED, dtype=int)
        try:
            padded[:len(answers)] = np.asarray(answers, dtype=int)
        except OverflowError as e:
            raise ValueError(f"Answer index out of range: {e}") from None
        correct = np.array([q.correct_index for q in questions], dtype=int)

        score = int(np.sum((padded == correct) & (padded != UNANSWERED)))

        return GradeResult(
            score=score,
            passed=score >= config.passing_score,
            total_questions=len(questions),
            passing_score=config.passing_score,
        )
