"""Unit tests for the scoring engine."""

from types import SimpleNamespace

import pytest

from featherlearn.engines.progression.scoring import AnswerSubmission, Scorer, round_half_up
from featherlearn.kernel.errors import InvalidExerciseIndex, ValidationError


def _exercises(*answers):
    return [SimpleNamespace(correct_answer=a, points=10) for a in answers]


def _answers(*pairs):
    return [AnswerSubmission(exercise_index=i, user_answer=a) for i, a in pairs]


class TestRoundHalfUp:

    @pytest.mark.parametrize(
        "numerator,denominator,expected",
        [(200, 3, 67), (100, 3, 33), (3750, 100, 38), (250, 100, 3), (0, 7, 0), (700, 7, 100)],
    )
    def test_rounding(self, numerator, denominator, expected):
        assert round_half_up(numerator, denominator) == expected

    def test_rejects_zero_denominator(self):
        with pytest.raises(ValueError):
            round_half_up(1, 0)


class TestScorer:

    def test_three_of_four_correct(self):
        result = Scorer.score(
            _answers((0, "hola"), (1, "adios"), (2, "gracias"), (3, "nope")),
            _exercises("hola", "adios", "gracias", "por favor"),
        )
        assert result.score == 75
        assert result.correct_answers == 3
        assert result.total_exercises == 4
        assert result.mistakes == 1
        assert [r.is_correct for r in result.results] == [True, True, True, False]

    def test_matching_ignores_case_and_whitespace(self):
        result = Scorer.score(_answers((0, "  HoLa ")), _exercises("hola"))
        assert result.score == 100
        assert result.results[0].user_answer == "  HoLa "

    def test_unanswered_exercises_count_against_the_score(self):
        result = Scorer.score(_answers((0, "a")), _exercises("a", "b", "c"))
        assert result.score == 33
        assert result.correct_answers == 1
        assert result.mistakes == 2

    def test_two_of_three_rounds_up(self):
        result = Scorer.score(_answers((0, "a"), (1, "b"), (2, "x")), _exercises("a", "b", "c"))
        assert result.score == 67

    def test_empty_submission_scores_zero(self):
        result = Scorer.score([], _exercises("a", "b"))
        assert result.score == 0
        assert result.results == []

    def test_answers_out_of_order(self):
        result = Scorer.score(_answers((1, "b"), (0, "a")), _exercises("a", "b"))
        assert result.score == 100
        assert [r.exercise_index for r in result.results] == [1, 0]

    @pytest.mark.parametrize("index", [2, 10, -1])
    def test_invalid_index(self, index):
        with pytest.raises(InvalidExerciseIndex) as exc_info:
            Scorer.score([AnswerSubmission(exercise_index=index, user_answer="a")], _exercises("a", "b"))
        assert exc_info.value.code == "invalid_exercise_index"
        assert exc_info.value.status_code == 400

    def test_duplicate_index(self):
        with pytest.raises(ValidationError) as exc_info:
            Scorer.score(_answers((0, "a"), (0, "a")), _exercises("a", "b"))
        assert exc_info.value.code == "duplicate_exercise_index"

    def test_lesson_without_exercises(self):
        with pytest.raises(ValidationError) as exc_info:
            Scorer.score(_answers((0, "a")), [])
        assert exc_info.value.code == "empty_lesson"
