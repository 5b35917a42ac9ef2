# -*- coding: utf-8 -*-
"""
Pydantic-схемы для эндпоинтов экзаменационных сессий.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from exam_engine.domain.enums import Subject
from exam_engine.domain.results import ExamResult, SubjectScore


class StartSessionRequest(BaseModel):
    student_id: uuid.UUID
    exam_id: Optional[int] = Field(None, description="ID экзамена")


class ExamResultResponse(BaseModel):
    """Результат в плоском виде: счетчики по каждому предмету и итог."""

    math_correct: int
    math_total: int
    math_percentage: float
    english_correct: int
    english_total: int
    english_percentage: float
    total_correct: int
    total_questions: int
    total_percentage: float
    completed_at: datetime
    subjects: List[SubjectScore]

    @field_serializer("completed_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()

    @classmethod
    def from_result(cls, result: ExamResult) -> "ExamResultResponse":
        math = result.score_for(Subject.MATH)
        english = result.score_for(Subject.ENGLISH)
        return cls(
            math_correct=math.correct,
            math_total=math.total,
            math_percentage=math.percentage,
            english_correct=english.correct,
            english_total=english.total,
            english_percentage=english.percentage,
            total_correct=result.total_correct,
            total_questions=result.total_questions,
            total_percentage=result.total_percentage,
            completed_at=result.completed_at,
            subjects=result.subjects,
        )
