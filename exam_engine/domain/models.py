# -*- coding: utf-8 -*-
"""
exam_engine/domain/models.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
ORM-модели домена экзаменов (SQLAlchemy 2.0).

Ограничения целостности живут в схеме БД:
- не более одного ответа на пару (сессия, вопрос);
- не более одной STARTED-сессии на студента (частичный уникальный индекс);
- удаление сессии каскадно удаляет ее ответы, удаление экзамена - его вопросы.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (JSON, Boolean, DateTime, Enum, ForeignKey, Index,
                        Integer, String, Text, UniqueConstraint, Uuid, text)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from exam_engine.domain.enums import SessionStatus, Subject
from exam_engine.utils.clock import utcnow

ACTIVE_SESSION_PREDICATE = text("status = 'STARTED'")


class Base(DeclarativeBase):
    """Базовый класс всех моделей."""


class Student(Base):
    """Студент. Регистрацией управляет внешний сервис, здесь только чтение."""

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    firstname: Mapped[str] = mapped_column(String(50), nullable=False)
    lastname: Mapped[str] = mapped_column(String(50), nullable=False)
    mobile_number: Mapped[Optional[str]] = mapped_column(String(10), unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    @property
    def display_name(self) -> str:
        return f"{self.firstname} {self.lastname}"


class Exam(Base):
    """Экзамен с ограничением по времени и упорядоченным списком вопросов."""

    __tablename__ = "exams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    time_limit_seconds: Mapped[Optional[int]] = mapped_column(Integer)

    questions: Mapped[List["Question"]] = relationship(
        back_populates="exam",
        order_by="Question.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Question(Base):
    """Вопрос с единственным правильным вариантом из 2-6."""

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exam_id: Mapped[int] = mapped_column(
        ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject: Mapped[Subject] = mapped_column(
        Enum(Subject, name="subject"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
    correct_index: Mapped[Optional[int]] = mapped_column(Integer)

    exam: Mapped[Exam] = relationship(back_populates="questions")


class ExamSession(Base):
    """Одна попытка студента по одному экзамену."""

    __tablename__ = "exam_sessions"
    __table_args__ = (
        Index("idx_student_status", "student_id", "status"),
        Index(
            "uq_exam_sessions_one_started_per_student",
            "student_id",
            unique=True,
            postgresql_where=ACTIVE_SESSION_PREDICATE,
            sqlite_where=ACTIVE_SESSION_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id: Mapped[int] = mapped_column(ForeignKey("exams.id"), nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("students.id"), nullable=False
    )
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status"),
        nullable=False,
        default=SessionStatus.STARTED,
    )
    start_time: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    submit_time: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Связанные объекты читаются через репозиторий каталога явно
    exam: Mapped[Exam] = relationship(lazy="raise")
    student: Mapped[Student] = relationship(lazy="raise")
    responses: Mapped[List["StudentResponse"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class StudentResponse(Base):
    """Выбранный студентом вариант (или его отсутствие) по одному вопросу."""

    __tablename__ = "student_responses"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uc_session_question"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("exam_sessions.id", ondelete="CASCADE"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    chosen_index: Mapped[Optional[int]] = mapped_column(Integer)
    # Денормализованный флаг на момент записи; при подсчете не используется
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    session: Mapped[ExamSession] = relationship(back_populates="responses")
    question: Mapped[Question] = relationship()
