import pytest

from conftest import answers_with_correct, build_questions
from models.errors import InvalidDivision
from services.scorer_service import UNANSWERED, ScorerService


@pytest.fixture
def aero_questions():
    return [q for q in build_questions() if q.division == "Aerodynamics"][:25]


@pytest.fixture
def elite_questions():
    return [q for q in build_questions() if q.division == "Elite"][:40]


def test_all_correct_passes(aero_questions):
    answers = [q.correct_index for q in aero_questions]
    result = ScorerService.grade_attempt("Aerodynamics", aero_questions, answers)

    assert result.score == 25
    assert result.passed
    assert result.total_questions == 25
    assert result.passing_score == 15


def test_all_blank_fails(aero_questions):
    result = ScorerService.grade_attempt("Aerodynamics", aero_questions, [UNANSWERED] * 25)
    assert result.score == 0
    assert not result.passed


@pytest.mark.parametrize("n_correct,passed", [(14, False), (15, True), (16, True), (10, False)])
def test_standard_threshold(aero_questions, n_correct, passed):
    answers = answers_with_correct(aero_questions, n_correct)
    result = ScorerService.grade_attempt("Aerodynamics", aero_questions, answers)
    assert result.score == n_correct
    assert result.passed is passed


@pytest.mark.parametrize("n_correct,passed", [(25, False), (26, True)])
def test_elite_threshold(elite_questions, n_correct, passed):
    answers = answers_with_correct(elite_questions, n_correct)
    result = ScorerService.grade_attempt("Elite", elite_questions, answers)
    assert result.score == n_correct
    assert result.passed is passed


def test_wrong_and_blank_score_the_same(aero_questions):
    wrong = answers_with_correct(aero_questions, 5)
    blank = [q.correct_index for q in aero_questions[:5]] + [UNANSWERED] * 20

    assert (ScorerService.grade_attempt("Aerodynamics", aero_questions, wrong).score
            == ScorerService.grade_attempt("Aerodynamics", aero_questions, blank).score
            == 5)


def test_out_of_range_and_missing_answers_score_zero(aero_questions):
    answers = [q.correct_index for q in aero_questions[:3]] + [99, -7]
    result = ScorerService.grade_attempt("Aerodynamics", aero_questions, answers)
    assert result.score == 3


def test_too_many_answers_raises(aero_questions):
    with pytest.raises(ValueError):
        ScorerService.grade_attempt("Aerodynamics", aero_questions, [0] * 26)


def test_unknown_division_raises(aero_questions):
    with pytest.raises(InvalidDivision):
        ScorerService.grade_attempt("Finance", aero_questions, [])


def test_overflowing_answer_raises_value_error(aero_questions):
    with pytest.raises(ValueError):
        ScorerService.grade_attempt("Aerodynamics", aero_questions, [10 ** 30])
