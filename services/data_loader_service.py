"""
Data Loader Service
"""

import json
import logging
import os
from typing import Dict, List

from models.question import Question

logger = logging.getLogger(__name__)


class DataLoaderService:
    """
    Service to load the bundled question dataset
    """

    @staticmethod
    def load_questions(path: str) -> List[Question]:
        """
        Load questions from the JSON dataset

        Args:
            path: Path of a file shaped like {"questions": [...]}

        Returns:
            List of Question objects, duplicate ids skipped

        Raises:
            FileNotFoundError: if the file does not exist
            ValueError: if an entry is not a valid question
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Question dataset not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        rows = data.get('questions', []) if isinstance(data, dict) else data
        return DataLoaderService.load_questions_from_data(rows)

    @staticmethod
    def load_questions_from_data(rows: List[Dict]) -> List[Question]:
        questions = []
        question_ids_seen = set()

        for row in rows:
            question_id = str(row.get('id', ''))

            if not question_id:
                raise ValueError(f"Question without id: {row!r}")
            if question_id in question_ids_seen:
                logger.warning("Duplicate question id %s skipped", question_id)
                continue

            try:
                question = Question(
                    question_id=question_id,
                    question=row['question'],
                    options=tuple(row['options']),
                    correct_index=int(row['correctIndex']),
                    division=row['division'],
                    difficulty=row.get('difficulty', 'medium'),
                )
            except (KeyError, TypeError) as e:
                raise ValueError(f"Malformed question {question_id}: {e}") from e
            except ValueError as e:
                raise ValueError(f"Invalid question {question_id}: {e}") from e

            questions.append(question)
            question_ids_seen.add(question_id)

        return questions
