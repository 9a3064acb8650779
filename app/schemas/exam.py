"""
LinguaHub Backend — Exam Schemas
==================================

What:  API contracts for exam submission and exam history.
How:   ExamSubmission validates only the two identifiers. Every other key
       (score, date, time_taken, ...) is kept exactly as the client sent
       it and stored with the entry.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExamSubmission(BaseModel):
    """
    Body of POST /submit-exam.

    Only student_id and exam_id are required. Typical extra keys are
    package_id, package_name, total_questions, total_correct_answers,
    time_taken, score, date and status; their types are not checked
    (a JS client may send date as epoch milliseconds or score as "85%").
    """
    model_config = ConfigDict(extra="allow")

    student_id: str = Field(min_length=1)
    exam_id: str = Field(min_length=1)

    @field_validator("student_id", "exam_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """Numeric identifiers are accepted and stored as strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ExamHistoryResponse(BaseModel):
    """Returned by GET /get-exam-history; `exams` is empty for new students."""
    student_id: str
    exams: List[Dict[str, Any]] = Field(default_factory=list)


class SubmitExamResult(BaseModel):
    student_id: str
    created: bool = Field(description="True when this submission created the student's record")
    total_exams: int = Field(description="Number of entries in the record after the append")


class SubmitExamResponse(BaseModel):
    message: str = Field(default="Exam submitted successfully")
    result: SubmitExamResult
