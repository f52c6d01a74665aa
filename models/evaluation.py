"""Evaluation models — evaluator score response, stored records, API bodies."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from models.base import CamelModel, DocumentModel

# Top-level evaluator keys this service reads; everything else goes to ``extras``.
_SUB_SCORE_KEYS = ("keyword", "reference", "grammar")


class SubScore(BaseModel):
    """One evaluator sub-score.  Keys besides ``score`` are kept as-is."""

    model_config = ConfigDict(extra="allow")

    score: Any = None


class ScoreResponse(CamelModel):
    """Structured evaluator response.

    Only the sub-scores the aggregator rewrites are typed; any other
    top-level key of the evaluator payload is preserved under ``extras``.
    """

    keyword: SubScore | None = None
    reference: SubScore | None = None
    grammar: SubScore | None = None
    final_score: int | float | None = None
    extras: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ScoreResponse:
        """Split a raw evaluator payload into typed sub-scores and extras.

        Values that do not have the expected shape (a sub-score that is not
        an object, a non-numeric ``finalScore``) are moved to ``extras``
        rather than rejected.
        """
        fields: dict[str, Any] = {}
        extras: dict[str, Any] = {}
        for key, value in payload.items():
            if key in _SUB_SCORE_KEYS and isinstance(value, dict):
                fields[key] = SubScore(**value)
            elif (
                key == "finalScore"
                and isinstance(value, (int, float))
                and not isinstance(value, bool)
            ):
                fields["final_score"] = value
            else:
                extras[key] = value
        return cls(**fields, extras=extras)


class Evaluation(DocumentModel):
    """A submission record as stored in the ``evaluations`` collection."""

    question_id: str
    user_id: str
    answer_text: str = Field(
        validation_alias=AliasChoices("answerText", "answer_text", "answer"),
        serialization_alias="answerText",
    )
    submitted_at: datetime
    evaluation: ScoreResponse = Field(default_factory=ScoreResponse)

    def to_document(self) -> dict[str, Any]:
        """Store the evaluator payload as received.

        Sub-scores the evaluator did not send stay absent; keys it sent with
        a null value are kept.
        """
        doc = self.model_dump(by_alias=True, exclude={"id", "evaluation"})
        doc["evaluation"] = self.evaluation.model_dump(by_alias=True, exclude_unset=True)
        return doc


class AnswerItem(CamelModel):
    """One answer inside ``POST /api/submit-answers``."""

    question_id: str
    answer_text: str = Field(
        validation_alias=AliasChoices("answerText", "answer_text", "answer"),
        serialization_alias="answerText",
    )


class SubmitAnswersRequest(CamelModel):
    """POST /api/submit-answers — request body."""

    answers: list[AnswerItem] = Field(min_length=1)


class SubmissionResult(CamelModel):
    """Outcome of one batch run."""

    session_id: str
    count: int


class SubmitAnswersResponse(CamelModel):
    """POST /api/submit-answers — response body."""

    message: str = "Answers submitted and evaluated successfully!"
    user_id: str
    count: int


class UpdateScoresRequest(CamelModel):
    """POST /api/updateScores/{questionId} — request body.

    Scores may be numbers or numeric strings.
    """

    keyword_score: int | float | str
    relevance_score: int | float | str
    grammar_score: int | float | str


class ScoreUpdateResult(CamelModel):
    """Outcome of a score update."""

    matched: bool
    final_score: float


class MessageResponse(CamelModel):
    message: str
