"""Domain-specific exceptions for the exam evaluation service.

These exceptions let the API layer distinguish between failure modes and
respond with the appropriate HTTP status (404 / 422 / 500).
"""

from __future__ import annotations


class ExamServiceError(Exception):
    """Base class for service errors."""


class NotFoundError(ExamServiceError):
    """A referenced entity (exam, question, evaluation set) does not exist."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}' not found")


class EvaluationFailedError(ExamServiceError):
    """The external evaluator returned a non-success response or was unreachable.

    Fatal for a whole submission batch: nothing from the batch is persisted.
    ``status_code`` is ``None`` for transport failures.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        if status_code is None:
            super().__init__(f"Evaluation failed: {detail}")
        else:
            super().__init__(f"Evaluation failed ({status_code}): {detail}")


class PersistenceError(ExamServiceError):
    """A record store read or write failed."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Record store {operation} failed: {detail}")


class InvalidScoreError(ExamServiceError):
    """A sub-score could not be parsed as an integer."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} is not a numeric score: {value!r}")
