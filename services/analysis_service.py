"""
Analysis Service - marks cards and question bank statistics
"""

from typing import Dict, List
from collections import defaultdict
import numpy as np
from models.division import ALL_DIVISIONS, get_division_config
from models.question import DIFFICULTIES, Question


class AnalysisService:
    """
    Service to summarize exam results and the question bank
    """

    @staticmethod
    def build_marks_card(score: int, division: str) -> Dict:
        """
        Marks card of a graded attempt, shown when an admin reviews an application

        One question is worth one mark, so wrong answers are the
        questions not scored.

        Args:
            score: Achieved score
            division: Division of the exam

        Returns:
            Dict with correct, wrong, percentage and pass status
        """
        config = get_division_config(division)
        total = config.total_questions
        correct = max(0, min(score, total))

        return {
            "division": division,
            "total_questions": total,
            "correct": correct,
            "wrong": total - correct,
            "percentage": int(correct * 100 / total + 0.5) if total else 0,
            "passing_score": config.passing_score,
            "passed": correct >= config.passing_score,
        }

    @staticmethod
    def analyze_bank(questions: List[Question]) -> Dict:
        """
        Counts of the bank by division and difficulty

        Args:
            questions: Questions of the bank

        Returns:
            Dict with totals, per-division breakdown and option statistics
        """
        if not questions:
            return {
                "total_questions": 0,
                "by_division": {
                    division: {
                        "total": 0,
                        "by_difficulty": {d: 0 for d in DIFFICULTIES},
                        "required": get_division_config(division).total_questions,
                        "sufficient": False,
                    }
                    for division in ALL_DIVISIONS
                },
                "options": {"min": 0, "max": 0, "mean": 0.0},
            }

        difficulty_count = defaultdict(lambda: defaultdict(int))
        for q in questions:
            difficulty_count[q.division][q.difficulty] += 1

        by_division = {}
        for division in ALL_DIVISIONS:
            counts = difficulty_count.get(division, {})
            total = int(sum(counts.values()))
            required = get_division_config(division).total_questions
            by_division[division] = {
                "total": total,
                "by_difficulty": {d: int(counts.get(d, 0)) for d in DIFFICULTIES},
                "required": required,
                "sufficient": total >= required,
            }

        option_counts = np.array([len(q.options) for q in questions])

        return {
            "total_questions": len(questions),
            "by_division": by_division,
            "options": {
                "min": int(np.min(option_counts)),
                "max": int(np.max(option_counts)),
                "mean": float(np.mean(option_counts)),
            },
        }
