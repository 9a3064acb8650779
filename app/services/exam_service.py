"""
LinguaHub Backend — Exam History Service
==========================================

What:  Reads a student's exam history and records new submissions.

Semantics worth knowing:
    - A student with no record has an empty history, not a missing one.
    - Submissions always append. Submitting the same exam_id twice leaves
      two entries; nothing is deduplicated or replaced.
    - The first submission creates the record. If two first submissions
      race, the unique index on student_id rejects the second insert and
      that submission is appended to the record the first one created.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, ValidationError
from app.models.exam_history import ExamHistory
from app.schemas.exam import (
    ExamHistoryResponse,
    ExamSubmission,
    SubmitExamResponse,
    SubmitExamResult,
)

logger = logging.getLogger(__name__)


class ExamService:

    async def _find(
        self, db: AsyncSession, student_id: str, for_update: bool = False
    ) -> Optional[ExamHistory]:
        query = select(ExamHistory).where(ExamHistory.student_id == student_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_history(self, db: AsyncSession, student_id: Optional[str]) -> ExamHistoryResponse:
        if not student_id:
            raise ValidationError(message="studentId is required", field="studentId")

        try:
            record = await self._find(db, student_id)
        except SQLAlchemyError as e:
            logger.error("Database error reading exam history for %s: %s", student_id, str(e))
            raise DatabaseError(
                message="Could not retrieve exam history. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if record is None:
            return ExamHistoryResponse(student_id=student_id, exams=[])
        return ExamHistoryResponse(student_id=record.student_id, exams=list(record.exams or []))

    @staticmethod
    def _build_entry(submission: ExamSubmission) -> Dict[str, Any]:
        # Only what the client sent, plus a submission date when it sent none
        entry = submission.model_dump(exclude={"student_id"}, exclude_unset=True)
        if entry.get("date") is None:
            entry["date"] = datetime.now(timezone.utc).isoformat()
        return entry

    async def _append(self, db: AsyncSession, record: ExamHistory, entry: Dict[str, Any]) -> int:
        record.exams = [*(record.exams or []), entry]
        await db.flush()
        return len(record.exams)

    async def submit(self, db: AsyncSession, submission: ExamSubmission) -> SubmitExamResponse:
        """
        Append one exam entry to the student's history, creating it if needed.

        Raises:
            DatabaseError: the write failed
        """
        student_id = submission.student_id
        entry = self._build_entry(submission)

        try:
            record = await self._find(db, student_id, for_update=True)
            if record is not None:
                total = await self._append(db, record, entry)
                created = False
            else:
                try:
                    db.add(ExamHistory(student_id=student_id, exams=[entry]))
                    await db.flush()
                    total, created = 1, True
                except IntegrityError:
                    await db.rollback()
                    logger.info("Concurrent first submission for %s; appending instead", student_id)
                    record = await self._find(db, student_id, for_update=True)
                    if record is None:
                        raise
                    total = await self._append(db, record, entry)
                    created = False

        except SQLAlchemyError as e:
            logger.error("Database error submitting exam for %s: %s", student_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the exam submission. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Exam %s recorded for student %s (total=%d, created=%s)",
            submission.exam_id,
            student_id,
            total,
            created,
        )
        return SubmitExamResponse(
            result=SubmitExamResult(student_id=student_id, created=created, total_exams=total)
        )


exam_service = ExamService()
