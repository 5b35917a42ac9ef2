# -*- coding: utf-8 -*-
"""
Значения, которые возвращают сервисы ядра.

Модели Pydantic, чтобы API мог отдавать их без дополнительного маппинга.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from exam_engine.domain.enums import SessionStatus, Subject


class SessionHandle(BaseModel):
    session_id: uuid.UUID
    exam_id: int
    duration_seconds: Optional[int] = None
    start_time: datetime
    is_existing: bool = False

    @field_serializer("start_time")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class SessionView(BaseModel):
    session_id: uuid.UUID
    exam_id: int
    student_id: uuid.UUID
    status: SessionStatus
    start_time: datetime
    submit_time: Optional[datetime] = None
    is_terminal: bool = False

    @field_serializer("start_time", "submit_time")
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class QuestionView(BaseModel):
    """Вопрос для студента: без индекса правильного ответа."""

    id: int
    subject: Subject
    content: str
    options: List[str]
    selected_option: Optional[int] = None


class QuestionPage(BaseModel):
    questions: List[QuestionView]
    total_pages: int
    current_page: int
    is_last_page: bool


class AnswerInput(BaseModel):
    question_id: int
    selected_option_index: Optional[int] = Field(
        default=None, description="Индекс выбранного варианта; null - снять ответ"
    )


class SubmissionSummary(BaseModel):
    answered_count: int
    total_count: int
    unanswered_count: int


class SubjectScore(BaseModel):
    subject: Subject
    correct: int = 0
    total: int = 0
    percentage: float = 0.0


class ExamResult(BaseModel):
    """Производный результат сессии; всегда пересчитывается из ответов."""

    subjects: List[SubjectScore]
    total_correct: int
    total_questions: int
    total_percentage: float
    completed_at: datetime = Field(description="Момент расчета результата")

    def score_for(self, subject: Subject) -> SubjectScore:
        for score in self.subjects:
            if score.subject == subject:
                return score
        return SubjectScore(subject=subject)

    @field_serializer("completed_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class ReportLocator(BaseModel):
    report_url: str


class ExamReport(BaseModel):
    """Данные для внешнего генератора документа-отчета."""

    session_id: uuid.UUID
    student_name: str
    exam_title: str
    result: ExamResult


class ExamSummary(BaseModel):
    id: int
    title: str
    time_limit_seconds: Optional[int] = None


class ExamHistoryEntry(BaseModel):
    session_id: uuid.UUID
    exam_title: str
    score: int
    total_questions: int
    date: datetime
    report_url: str

    @field_serializer("date")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()
