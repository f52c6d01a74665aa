"""Shared pytest fixtures.

Provides:
- ``store``: fresh InMemoryRecordStore per test
- ``evaluator``: StubEvaluator that always succeeds (configurable failures)
- ``throttle``: RecordingThrottle that counts waits without sleeping
- ``published_exam``: an exam with two questions already in ``store``
"""

from __future__ import annotations

import pytest

from errors import EvaluationFailedError
from models.evaluation import ScoreResponse
from models.exam import QuestionInput
from services.exam_service import ExamService
from services.record_store import InMemoryRecordStore
from services.throttle import Throttle


class StubEvaluator:
    """Evaluator double.  Fails on the call numbers listed in ``fail_on`` (1-based)."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[dict] = []

    async def evaluate(self, question, answer, reference_answer, keywords):
        self.calls.append({
            "question": question,
            "answer": answer,
            "reference_answer": reference_answer,
            "keywords": keywords,
        })
        if len(self.calls) in self.fail_on:
            raise EvaluationFailedError("stubbed failure", status_code=500)
        return ScoreResponse.from_payload({
            "keyword": {"score": 80},
            "reference": {"score": 90},
            "grammar": {"score": 70},
            "finalScore": 82,
        })


class RecordingThrottle(Throttle):
    """Counts waits; records how many evaluator calls happened before each."""

    def __init__(self, evaluator: StubEvaluator | None = None) -> None:
        self.waits = 0
        self.calls_at_wait: list[int] = []
        self._evaluator = evaluator

    async def wait(self) -> None:
        self.waits += 1
        if self._evaluator is not None:
            self.calls_at_wait.append(len(self._evaluator.calls))


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Fresh record store, isolated per test."""
    return InMemoryRecordStore()


@pytest.fixture
def evaluator() -> StubEvaluator:
    return StubEvaluator()


@pytest.fixture
def throttle(evaluator) -> RecordingThrottle:
    return RecordingThrottle(evaluator)


@pytest.fixture
async def published_exam(store):
    """Exam 'Biology' with two questions; returns the PublishedExam."""
    service = ExamService(store)
    return await service.publish_exam("Biology", [
        QuestionInput(text="What is a cell?", reference_answer="The unit of life", keywords=["unit", "life"]),
        QuestionInput(text="What is DNA?", reference_answer="Genetic material", keywords=["genetic"]),
    ])
