"""
Question Bank Service
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

import numpy as np

from models.division import (
    ELITE,
    ELITE_FALLBACK_DIFFICULTIES,
    ELITE_FALLBACK_PER_DIVISION,
    STANDARD_DIVISIONS,
    get_division_config,
)
from models.question import Question

logger = logging.getLogger(__name__)


class QuestionBankService:
    """
    Service holding the static question pool and drawing exam sets from it
    """

    def __init__(self, questions: Sequence[Question], rng: Optional[np.random.Generator] = None):
        self._questions: List[Question] = list(questions)
        self._by_id: Dict[str, Question] = {q.question_id: q for q in self._questions}
        self.rng = rng or np.random.default_rng()

    def __len__(self) -> int:
        return len(self._questions)

    def draw_questions(self, division: str) -> List[Question]:
        """
        Draw a randomized exam set for a division

        Strategy:
        - Standard division: every question of that division, shuffled,
          cut to the configured count
        - Elite: the dedicated Elite pool when it is non-empty, otherwise a
          composite of medium/hard questions from each standard division

        Args:
            division: Division chosen by the applicant

        Returns:
            Fresh list of questions without repeats. When the pool holds
            fewer questions than configured, all of them are returned.

        Raises:
            InvalidDivision: if the division is not recognized
        """
        config = get_division_config(division)

        if config.is_elite:
            elite_pool = self.questions_for_division(ELITE)
            if elite_pool:
                selected = self._shuffle(elite_pool)[:config.total_questions]
            else:
                logger.info("No Elite-tagged questions, compositing from standard divisions")
                selected = self._composite_elite_set()
        else:
            pool = self.questions_for_division(division)
            selected = self._shuffle(pool)[:config.total_questions]

        if len(selected) < config.total_questions:
            logger.warning(
                "Division %s: only %d of %d questions available",
                division, len(selected), config.total_questions
            )

        return selected

    def _composite_elite_set(self) -> List[Question]:
        generated: List[Question] = []
        for division in STANDARD_DIVISIONS:
            candidates = [
                q for q in self.questions_for_division(division)
                if q.difficulty in ELITE_FALLBACK_DIFFICULTIES
            ]
            generated.extend(self._shuffle(candidates)[:ELITE_FALLBACK_PER_DIVISION])
        return self._shuffle(generated)

    def _shuffle(self, questions: List[Question]) -> List[Question]:
        if not questions:
            return []
        order = self.rng.permutation(len(questions))
        return [questions[i] for i in order]

    def questions_for_division(self, division: str) -> List[Question]:
        return [q for q in self._questions if q.division == division]

    def get_question(self, question_id: str) -> Question:
        return self._by_id[question_id]

    def all_questions(self) -> List[Question]:
        return list(self._questions)

    def count_by_division(self) -> Dict[str, int]:
        return dict(Counter(q.division for q in self._questions))
