"""Question API — list questions (optionally per exam) and fetch one by id."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_exam_service
from errors import NotFoundError
from models.exam import Question
from services.exam_service import ExamService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["questions"])


@router.get("/questions", response_model=list[Question])
async def list_questions(service: ExamService = Depends(get_exam_service)):
    try:
        return await service.get_questions()
    except Exception as e:
        logger.exception("Failed to fetch questions")
        raise HTTPException(status_code=500, detail="Failed to fetch questions") from e


@router.get("/questions/{question_id}", response_model=Question)
async def get_question(
    question_id: str,
    service: ExamService = Depends(get_exam_service),
):
    try:
        return await service.get_question(question_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Question not found") from e
    except Exception as e:
        logger.exception("Failed to fetch question %s", question_id)
        raise HTTPException(status_code=500, detail="Failed to fetch question") from e


@router.get("/getQuestions", response_model=list[Question])
async def get_questions(
    exam_id: str | None = Query(default=None, alias="examId"),
    service: ExamService = Depends(get_exam_service),
):
    """Questions of one exam when ``examId`` is given, otherwise all of them."""
    try:
        return await service.get_questions(exam_id)
    except Exception as e:
        logger.exception("Failed to fetch questions (examId=%s)", exam_id)
        raise HTTPException(status_code=500, detail="Failed to fetch questions") from e
