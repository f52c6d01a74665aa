"""Exam publication and read-side lookups over the record store."""

from __future__ import annotations

import logging
from typing import Sequence

from errors import NotFoundError
from models.evaluation import Evaluation
from models.exam import Exam, PublishedExam, Question, QuestionInput
from services.record_store import EVALUATIONS, EXAMS, QUESTIONS, RecordStore

logger = logging.getLogger(__name__)


class ExamService:
    """Publishes exams and answers the query endpoints."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    # -- write side ----------------------------------------------------------

    async def publish_exam(
        self, title: str, questions: Sequence[QuestionInput]
    ) -> PublishedExam:
        """Insert the exam, then all of its questions in one bulk write."""
        exam_id = await self._store.insert_one(EXAMS, Exam(title=title).to_document())
        docs = [
            Question(
                exam_id=exam_id,
                text=q.text,
                reference_answer=q.reference_answer,
                keywords=q.keywords,
            ).to_document()
            for q in questions
        ]
        question_ids = await self._store.insert_many(QUESTIONS, docs) if docs else []
        logger.info("Published exam %s with %d questions", exam_id, len(question_ids))
        return PublishedExam(exam_id=exam_id, question_ids=question_ids)

    # -- exams ---------------------------------------------------------------

    async def get_exams(self) -> list[Exam]:
        return [Exam.model_validate(d) for d in await self._store.find(EXAMS)]

    async def get_exam(self, exam_id: str) -> Exam:
        doc = await self._store.find_one(EXAMS, {"id": exam_id})
        if doc is None:
            raise NotFoundError("Exam", exam_id)
        return Exam.model_validate(doc)

    # -- questions -----------------------------------------------------------

    async def get_questions(self, exam_id: str | None = None) -> list[Question]:
        """All questions, or only those of *exam_id* when given."""
        filter = {"examId": exam_id} if exam_id else None
        return [Question.model_validate(d) for d in await self._store.find(QUESTIONS, filter)]

    async def get_question(self, question_id: str) -> Question:
        doc = await self._store.find_one(QUESTIONS, {"id": question_id})
        if doc is None:
            raise NotFoundError("Question", question_id)
        return Question.model_validate(doc)

    # -- evaluations ---------------------------------------------------------

    async def get_submissions_by_question(self, question_id: str) -> list[Evaluation]:
        docs = await self._store.find(EVALUATIONS, {"questionId": question_id})
        if not docs:
            raise NotFoundError("Submissions for question", question_id)
        return [Evaluation.model_validate(d) for d in docs]

    async def get_student_result(self, exam_id: str, user_id: str) -> list[Evaluation]:
        """Evaluations by *user_id* for any question belonging to *exam_id*.

        Two-stage lookup: resolve the exam's question ids, then filter
        evaluations on user and question id set.
        """
        questions = await self._store.find(QUESTIONS, {"examId": exam_id})
        question_ids = [q["id"] for q in questions]
        docs: list[dict] = []
        if question_ids:
            docs = await self._store.find(EVALUATIONS, {
                "userId": user_id,
                "questionId": {"$in": question_ids},
            })
        if not docs:
            raise NotFoundError("Student result", f"{exam_id}/{user_id}")
        return [Evaluation.model_validate(d) for d in docs]
