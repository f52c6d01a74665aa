"""Exam and question models — stored documents plus publish request/response."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from models.base import CamelModel, DocumentModel


class Exam(DocumentModel):
    """An exam as stored in the ``exams`` collection."""

    title: str


class Question(DocumentModel):
    """A question as stored in the ``questions`` collection."""

    exam_id: str
    text: str
    reference_answer: str = Field(
        default="",
        validation_alias=AliasChoices("referenceAnswer", "reference_answer", "answer"),
        serialization_alias="referenceAnswer",
    )
    keywords: list[str] = Field(default_factory=list)


class QuestionInput(CamelModel):
    """One question inside ``POST /api/exams``.

    ``answer`` is accepted as an alias of ``referenceAnswer``.
    """

    text: str
    reference_answer: str = Field(
        default="",
        validation_alias=AliasChoices("referenceAnswer", "reference_answer", "answer"),
        serialization_alias="referenceAnswer",
    )
    keywords: list[str] = Field(default_factory=list)


class PublishExamRequest(CamelModel):
    """POST /api/exams — request body."""

    title: str
    questions: list[QuestionInput] = Field(default_factory=list)


class PublishedExam(CamelModel):
    """Identifiers assigned when an exam is published."""

    exam_id: str
    question_ids: list[str] = Field(default_factory=list)


class PublishExamResponse(PublishedExam):
    """POST /api/exams — response body."""

    message: str = "Exam and questions published successfully!"
