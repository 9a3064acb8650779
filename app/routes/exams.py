"""
LinguaHub Backend — Exam Route Handlers
=========================================

What:  Exam history read and exam submission.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.exam import ExamHistoryResponse, ExamSubmission, SubmitExamResponse
from app.services.exam_service import exam_service

router = APIRouter(tags=["Exams"])


@router.get(
    "/get-exam-history",
    response_model=ExamHistoryResponse,
    responses={400: {"description": "studentId missing", "model": ErrorResponse}},
    summary="Get a student's exam history",
)
async def get_exam_history(
    studentId: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ExamHistoryResponse:
    """Students without submissions get {student_id, exams: []}, never 404."""
    return await exam_service.get_history(db, studentId)


@router.post(
    "/submit-exam",
    response_model=SubmitExamResponse,
    responses={400: {"description": "student_id or exam_id missing", "model": ErrorResponse}},
    summary="Record an exam attempt",
)
async def submit_exam(
    submission: ExamSubmission,
    db: AsyncSession = Depends(get_db_session),
) -> SubmitExamResponse:
    return await exam_service.submit(db, submission)
