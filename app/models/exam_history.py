"""
LinguaHub Backend — Exam History Model
========================================

What:  One record per student holding every exam attempt they submitted.
Why:   student_id is unique so a second "first submission" racing the first
       fails on insert instead of creating a second record.

Exam entry shape (stored as-is in the `exams` JSON list):
    {exam_id, package_id, package_name, total_questions,
     total_correct_answers, time_taken, score, date, status}

Entries are appended, never replaced: resubmitting an exam_id adds a
second entry for it.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, DocumentJSON


class ExamHistory(Base):
    __tablename__ = "exam_histories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    student_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    exams: Mapped[List[Dict[str, Any]]] = mapped_column(
        DocumentJSON,
        nullable=False,
        default=list,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<ExamHistory(student_id='{self.student_id}', exams={len(self.exams or [])})>"
