"""Submission coordinator — sequential, throttled evaluation of an answer batch.

Answers are scored strictly in input order, one evaluator call at a time,
with the throttle between calls.  Results are held in memory and written
with a single ``insert_many`` only after every answer scored, so storage is
all-or-nothing.  Evaluator calls already made for earlier answers are not
compensated when a later one fails.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Sequence

from errors import NotFoundError
from models.evaluation import AnswerItem, Evaluation, SubmissionResult
from models.exam import Question
from services.evaluator_client import EvaluatorClient
from services.record_store import EVALUATIONS, QUESTIONS, RecordStore
from services.throttle import Throttle

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Opaque per-submission identity token (not an authenticated user)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionCoordinator:
    """Runs one evaluation batch per :meth:`submit` call."""

    def __init__(
        self,
        store: RecordStore,
        evaluator: EvaluatorClient,
        throttle: Throttle,
        id_factory: Callable[[], str] = generate_session_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._throttle = throttle
        self._id_factory = id_factory
        self._clock = clock

    async def submit(self, answers: Sequence[AnswerItem]) -> SubmissionResult:
        """Score and persist a batch.

        Raises:
            NotFoundError: an answer references an unknown question.
            EvaluationFailedError: the evaluator failed for any answer.
            PersistenceError: the store failed.

        Nothing from the batch is stored when any of these is raised.
        """
        session_id = self._id_factory()
        records: list[Evaluation] = []

        for index, item in enumerate(answers):
            if index > 0:
                await self._throttle.wait()

            doc = await self._store.find_one(QUESTIONS, {"id": item.question_id})
            if doc is None:
                self._log_discarded(session_id, len(records), len(answers))
                raise NotFoundError("Question", item.question_id)
            question = Question.model_validate(doc)

            try:
                score = await self._evaluator.evaluate(
                    question=question.text,
                    answer=item.answer_text,
                    reference_answer=question.reference_answer,
                    keywords=question.keywords,
                )
            except Exception:
                self._log_discarded(session_id, len(records), len(answers))
                raise

            records.append(Evaluation(
                question_id=item.question_id,
                user_id=session_id,
                answer_text=item.answer_text,
                submitted_at=self._clock(),
                evaluation=score,
            ))
            logger.debug(
                "[Submit] session=%s scored %d/%d (question=%s)",
                session_id, index + 1, len(answers), item.question_id,
            )

        if records:
            await self._store.insert_many(
                EVALUATIONS, [r.to_document() for r in records]
            )
        logger.info("[Submit] session=%s persisted %d evaluations", session_id, len(records))
        return SubmissionResult(session_id=session_id, count=len(records))

    @staticmethod
    def _log_discarded(session_id: str, scored: int, total: int) -> None:
        logger.warning(
            "[Submit] session=%s aborted, discarding %d scored of %d answers",
            session_id, scored, total,
        )
