"""
Domain errors raised by services and engines.

Each error carries the HTTP status and a machine-readable code; the API layer
renders them via the exception handler registered in featherlearn.main.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for business-rule failures scoped to one request."""

    status_code: int = 400
    code: str = "domain_error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class ValidationError(DomainError):
    status_code = 400
    code = "validation_error"


class ConflictError(DomainError):
    status_code = 409
    code = "conflict"


class ForbiddenError(DomainError):
    status_code = 403
    code = "forbidden"


class UnauthenticatedError(DomainError):
    status_code = 401
    code = "unauthenticated"


# Specific failures

class InvalidExerciseIndex(ValidationError):
    code = "invalid_exercise_index"

    def __init__(self, index: int):
        super().__init__(f"Invalid exercise index: {index}")
        self.index = index


class InvalidPoints(ValidationError):
    code = "invalid_points"

    def __init__(self, points: int):
        super().__init__(f"Invalid points value: {points}")
        self.points = points


class AlreadyCompleted(ConflictError):
    code = "already_completed"

    def __init__(self, message: str = "Lesson already completed"):
        super().__init__(message)


class AlreadyClaimed(ConflictError):
    code = "already_claimed"

    def __init__(self, quest_id: str):
        super().__init__(f"Quest reward already claimed: {quest_id}")
        self.quest_id = quest_id


class DuplicateFollow(ConflictError):
    code = "duplicate_follow"

    def __init__(self):
        super().__init__("You are already following this user")


class OverlappingLeagueRange(ConflictError):
    code = "overlapping_league_range"

    def __init__(self, name: str, other: str):
        super().__init__(f"League '{name}' overlaps the point range of '{other}'")
