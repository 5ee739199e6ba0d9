"""
Division policy
"""

from dataclasses import dataclass
from typing import Dict, List

from models.errors import InvalidDivision

AERODYNAMICS = "Aerodynamics"
AVIONICS = "Avionics"
PROPULSION = "Propulsion"
STRUCTURE = "Structure"
ELITE = "Elite"

STANDARD_DIVISIONS: List[str] = [AERODYNAMICS, AVIONICS, PROPULSION, STRUCTURE]
ALL_DIVISIONS: List[str] = STANDARD_DIVISIONS + [ELITE]


@dataclass(frozen=True)
class DivisionConfig:
    """Exam policy of one division"""
    division: str
    passing_score: int
    total_questions: int
    time_limit_seconds: int

    def __post_init__(self):
        if self.division not in ALL_DIVISIONS:
            raise InvalidDivision(self.division)
        if self.passing_score > self.total_questions:
            raise ValueError(
                f"{self.division}: passing score {self.passing_score} "
                f"exceeds question count {self.total_questions}"
            )

    @property
    def is_elite(self) -> bool:
        return self.division == ELITE


DIVISION_CONFIGS: Dict[str, DivisionConfig] = {
    AERODYNAMICS: DivisionConfig(AERODYNAMICS, passing_score=15, total_questions=25, time_limit_seconds=30 * 60),
    AVIONICS: DivisionConfig(AVIONICS, passing_score=15, total_questions=25, time_limit_seconds=30 * 60),
    PROPULSION: DivisionConfig(PROPULSION, passing_score=15, total_questions=25, time_limit_seconds=30 * 60),
    STRUCTURE: DivisionConfig(STRUCTURE, passing_score=15, total_questions=25, time_limit_seconds=30 * 60),
    ELITE: DivisionConfig(ELITE, passing_score=26, total_questions=40, time_limit_seconds=60 * 60),
}

# Elite fallback: questions taken from each standard division
ELITE_FALLBACK_PER_DIVISION = 10
ELITE_FALLBACK_DIFFICULTIES = ("medium", "hard")


def get_division_config(division: str) -> DivisionConfig:
    """
    Resolve the policy of a division

    Args:
        division: Division name, e.g. "Aerodynamics" or "Elite"

    Returns:
        DivisionConfig of that division

    Raises:
        InvalidDivision: if the name is not recognized
    """
    try:
        return DIVISION_CONFIGS[division]
    except (KeyError, TypeError):
        raise InvalidDivision(division) from None
