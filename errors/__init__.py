"""Custom exception hierarchy for the exam evaluation service."""

from errors.exceptions import (
    EvaluationFailedError,
    ExamServiceError,
    InvalidScoreError,
    NotFoundError,
    PersistenceError,
)

__all__ = [
    "EvaluationFailedError",
    "ExamServiceError",
    "InvalidScoreError",
    "NotFoundError",
    "PersistenceError",
]
