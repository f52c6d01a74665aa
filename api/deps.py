"""FastAPI dependencies — resolve lifespan-managed resources from ``app.state``."""

from __future__ import annotations

from fastapi import Depends, Request

from services.evaluator_client import EvaluatorClient
from services.exam_service import ExamService
from services.record_store import RecordStore
from services.score_aggregator import ScoreAggregator
from services.submission import SubmissionCoordinator
from services.throttle import Throttle


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_evaluator(request: Request) -> EvaluatorClient:
    return request.app.state.evaluator


def get_throttle(request: Request) -> Throttle:
    """A fresh throttle per request so batches never share gate state."""
    return request.app.state.throttle_factory()


def get_exam_service(store: RecordStore = Depends(get_record_store)) -> ExamService:
    return ExamService(store)


def get_score_aggregator(store: RecordStore = Depends(get_record_store)) -> ScoreAggregator:
    return ScoreAggregator(store)


def get_submission_coordinator(
    store: RecordStore = Depends(get_record_store),
    evaluator: EvaluatorClient = Depends(get_evaluator),
    throttle: Throttle = Depends(get_throttle),
) -> SubmissionCoordinator:
    """A fresh coordinator per request."""
    return SubmissionCoordinator(store, evaluator, throttle)
