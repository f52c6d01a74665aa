"""Submission API — evaluate answer batches, query results, update scores.

Endpoints:
- ``POST /api/submit-answers``                    — run one evaluation batch
- ``GET  /api/submissions/{questionId}``          — evaluations for a question
- ``GET  /api/studentResult/{examId}/{userId}``   — one student's exam result
- ``POST /api/updateScores/{questionId}``         — deprecated, first match only
- ``POST /api/evaluations/{evaluationId}/scores`` — update one evaluation record
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_exam_service, get_score_aggregator, get_submission_coordinator
from errors import EvaluationFailedError, InvalidScoreError, NotFoundError
from models.evaluation import (
    Evaluation,
    MessageResponse,
    SubmitAnswersRequest,
    SubmitAnswersResponse,
    UpdateScoresRequest,
)
from services.exam_service import ExamService
from services.score_aggregator import ScoreAggregator
from services.submission import SubmissionCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submissions"])


@router.post("/submit-answers", status_code=201, response_model=SubmitAnswersResponse)
async def submit_answers(
    req: SubmitAnswersRequest,
    coordinator: SubmissionCoordinator = Depends(get_submission_coordinator),
):
    """Score every answer in order and store the results all-or-nothing."""
    try:
        result = await coordinator.submit(req.answers)
    except NotFoundError as e:
        logger.warning("Submission rejected: %s", e)
        raise HTTPException(status_code=404, detail="Question not found") from e
    except EvaluationFailedError as e:
        logger.error("Error submitting and evaluating answers: %s", e)
        raise HTTPException(
            status_code=500, detail="Failed to submit and evaluate answers"
        ) from e
    except Exception as e:
        logger.exception("Error submitting and evaluating answers")
        raise HTTPException(
            status_code=500, detail="Failed to submit and evaluate answers"
        ) from e
    return SubmitAnswersResponse(user_id=result.session_id, count=result.count)


@router.get("/submissions/{question_id}", response_model=list[Evaluation])
async def get_submissions(
    question_id: str,
    service: ExamService = Depends(get_exam_service),
):
    try:
        return await service.get_submissions_by_question(question_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=404, detail="No submissions found for this question"
        ) from e
    except Exception as e:
        logger.exception("Failed to fetch submissions for question %s", question_id)
        raise HTTPException(status_code=500, detail="Failed to fetch submissions") from e


@router.get("/studentResult/{exam_id}/{user_id}", response_model=list[Evaluation])
async def get_student_result(
    exam_id: str,
    user_id: str,
    service: ExamService = Depends(get_exam_service),
):
    try:
        return await service.get_student_result(exam_id, user_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=404, detail="No student result found for this exam and userID"
        ) from e
    except Exception as e:
        logger.exception("Failed to fetch student result %s/%s", exam_id, user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch student result") from e


@router.post("/updateScores/{question_id}", response_model=MessageResponse)
async def update_scores(
    question_id: str,
    req: UpdateScoresRequest,
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
):
    """Deprecated: updates whichever evaluation of the question matches first."""
    return await _run_update(
        aggregator.update_score,
        question_id,
        req,
    )


@router.post("/evaluations/{evaluation_id}/scores", response_model=MessageResponse)
async def update_evaluation_scores(
    evaluation_id: str,
    req: UpdateScoresRequest,
    aggregator: ScoreAggregator = Depends(get_score_aggregator),
):
    return await _run_update(
        aggregator.update_evaluation_score,
        evaluation_id,
        req,
    )


async def _run_update(update, target_id: str, req: UpdateScoresRequest) -> MessageResponse:
    try:
        await update(
            target_id,
            req.keyword_score,
            req.relevance_score,
            req.grammar_score,
        )
    except InvalidScoreError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Submission not found") from e
    except Exception as e:
        logger.exception("Failed to update scores for %s", target_id)
        raise HTTPException(status_code=500, detail="Failed to update scores") from e
    return MessageResponse(message="Scores updated successfully")
