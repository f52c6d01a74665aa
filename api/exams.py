"""Exam API — publish an exam with its questions, list and fetch exams."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_exam_service
from errors import NotFoundError
from models.exam import Exam, PublishExamRequest, PublishExamResponse
from services.exam_service import ExamService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["exams"])


@router.post("/exams", status_code=201, response_model=PublishExamResponse)
async def publish_exam(
    req: PublishExamRequest,
    service: ExamService = Depends(get_exam_service),
):
    """Create the exam and all of its questions."""
    try:
        published = await service.publish_exam(req.title, req.questions)
    except Exception as e:
        logger.exception("Failed to publish exam %r", req.title)
        raise HTTPException(
            status_code=500, detail="Failed to publish exam and questions"
        ) from e
    return PublishExamResponse(
        exam_id=published.exam_id,
        question_ids=published.question_ids,
    )


@router.get("/exams", response_model=list[Exam])
async def list_exams(service: ExamService = Depends(get_exam_service)):
    try:
        return await service.get_exams()
    except Exception as e:
        logger.exception("Failed to fetch exams")
        raise HTTPException(status_code=500, detail="Failed to fetch exams") from e


@router.get("/exams/{exam_id}", response_model=Exam)
async def get_exam(exam_id: str, service: ExamService = Depends(get_exam_service)):
    try:
        return await service.get_exam(exam_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Exam not found") from e
    except Exception as e:
        logger.exception("Failed to fetch exam %s", exam_id)
        raise HTTPException(status_code=500, detail="Failed to fetch exam") from e
