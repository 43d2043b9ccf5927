"""
Scoring Engine - turns submitted answers into a lesson score.
"""

from typing import Any, List, Sequence

from pydantic import BaseModel, Field

from featherlearn.kernel.errors import InvalidExerciseIndex, ValidationError


def round_half_up(numerator: int, denominator: int) -> int:
    """Round numerator/denominator to the nearest int, halves going up (non-negative inputs)."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (2 * numerator + denominator) // (2 * denominator)


class AnswerSubmission(BaseModel):
    """One submitted answer, addressed by the exercise's position in the lesson."""

    exercise_index: int
    user_answer: str
    time_spent: int = Field(default=0, ge=0)


class ExerciseResult(BaseModel):
    """Graded answer stored on the progress record."""

    exercise_index: int
    is_correct: bool
    user_answer: str
    correct_answer: str
    time_spent: int = 0
    points: int


class ScoreResult(BaseModel):
    score: int
    correct_answers: int
    total_exercises: int
    mistakes: int
    results: List[ExerciseResult]


class Scorer:
    """
    Grades a submission against a lesson's ordered exercises.

    Answers match when they are equal after trimming whitespace and
    lower-casing. The score is the share of the lesson's exercises answered
    correctly, on a 0-100 scale; unanswered exercises count as wrong.
    """

    @staticmethod
    def normalize(answer: str) -> str:
        return answer.strip().lower()

    @classmethod
    def is_correct(cls, submitted: str, expected: str) -> bool:
        return cls.normalize(submitted) == cls.normalize(expected)

    @classmethod
    def score(
        cls,
        answers: Sequence[AnswerSubmission],
        exercises: Sequence[Any],
    ) -> ScoreResult:
        """
        Score a submission.

        Args:
            answers: Submitted answers
            exercises: Lesson exercises in order; each needs ``correct_answer``
                and ``points`` attributes

        Returns:
            ScoreResult with per-exercise results

        Raises:
            ValidationError: The lesson has no exercises or an index repeats
            InvalidExerciseIndex: An answer points outside the exercise list
        """
        total = len(exercises)
        if total == 0:
            raise ValidationError("Lesson has no exercises to score", code="empty_lesson")

        seen: set[int] = set()
        results: List[ExerciseResult] = []
        correct = 0

        for answer in answers:
            index = answer.exercise_index
            if index < 0 or index >= total:
                raise InvalidExerciseIndex(index)
            if index in seen:
                raise ValidationError(
                    f"Duplicate answer for exercise index: {index}",
                    code="duplicate_exercise_index",
                )
            seen.add(index)

            exercise = exercises[index]
            ok = cls.is_correct(answer.user_answer, exercise.correct_answer)
            if ok:
                correct += 1
            results.append(
                ExerciseResult(
                    exercise_index=index,
                    is_correct=ok,
                    user_answer=answer.user_answer,
                    correct_answer=exercise.correct_answer,
                    time_spent=answer.time_spent,
                    points=exercise.points,
                )
            )

        return ScoreResult(
            score=round_half_up(100 * correct, total),
            correct_answers=correct,
            total_exercises=total,
            mistakes=len(results) - correct,
            results=results,
        )
