# -*- coding: utf-8 -*-
"""
Фикстуры для тестирования экзаменационных сессий
"""

import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.domain.enums import SessionStatus, Subject
from exam_engine.domain.models import Exam, ExamSession, Question, Student
from exam_engine.repository.base import create_item
from exam_engine.utils.clock import utcnow

# (предмет, индекс правильного ответа) для примера из документации:
# два вопроса по математике и два по английскому
WORKED_EXAMPLE_QUESTIONS: List[Tuple[Subject, int]] = [
    (Subject.MATH, 0),
    (Subject.MATH, 1),
    (Subject.ENGLISH, 2),
    (Subject.ENGLISH, 0),
]


async def create_test_student(
    session: AsyncSession,
    firstname: str = "Ivan",
    lastname: str = "Petrov",
    mobile_number: Optional[str] = None,
) -> Student:
    """Создать тестового студента"""
    return await create_item(
        session,
        Student,
        id=uuid.uuid4(),
        firstname=firstname,
        lastname=lastname,
        mobile_number=mobile_number,
    )


async def create_test_exam(
    session: AsyncSession,
    title: str = "Entrance Exam",
    time_limit_seconds: Optional[int] = 3600,
) -> Exam:
    """Создать тестовый экзамен"""
    return await create_item(
        session, Exam, title=title, time_limit_seconds=time_limit_seconds
    )


async def create_test_questions(
    session: AsyncSession,
    exam_id: int,
    specs: Sequence[Tuple[Subject, int]] = WORKED_EXAMPLE_QUESTIONS,
    options_count: int = 4,
) -> List[Question]:
    """Создать вопросы экзамена по списку (предмет, правильный индекс)"""
    questions = []
    for i, (subject, correct_index) in enumerate(specs):
        question = await create_item(
            session,
            Question,
            exam_id=exam_id,
            subject=subject,
            content=f"Question {i + 1}",
            options=[f"Option {j}" for j in range(options_count)],
            correct_index=correct_index,
        )
        questions.append(question)
    return questions


async def create_test_session(
    session: AsyncSession,
    exam_id: int,
    student_id: uuid.UUID,
    status: SessionStatus = SessionStatus.STARTED,
    start_time: Optional[datetime] = None,
    submit_time: Optional[datetime] = None,
) -> ExamSession:
    """Создать экзаменационную сессию в нужном статусе"""
    return await create_item(
        session,
        ExamSession,
        id=uuid.uuid4(),
        exam_id=exam_id,
        student_id=student_id,
        status=status,
        start_time=start_time or utcnow(),
        submit_time=submit_time,
    )


async def create_exam_setup(
    session: AsyncSession,
    specs: Sequence[Tuple[Subject, int]] = WORKED_EXAMPLE_QUESTIONS,
) -> Tuple[Student, Exam, List[Question]]:
    """Создать студента, экзамен и его вопросы"""
    student = await create_test_student(session)
    exam = await create_test_exam(session)
    questions = await create_test_questions(session, exam.id, specs)
    return student, exam, questions
