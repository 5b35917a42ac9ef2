# -*- coding: utf-8 -*-
"""
Репозиторий каталога экзаменов и справочника студентов.

Каталог и регистрация студентов ведутся внешними сервисами; здесь только
контракт чтения, который использует ядро сессий.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.config.logger import configure_logger
from exam_engine.domain.models import Exam, Question, Student
from exam_engine.repository.base import get_item, list_items

logger = configure_logger(__name__)


async def get_exam(session: AsyncSession, exam_id: int) -> Exam:
    """
    Получить экзамен по ID.

    Raises:
        NotFoundError: Если экзамен не найден
    """
    return await get_item(session, Exam, exam_id)


async def list_exams(session: AsyncSession) -> List[Exam]:
    """Получить все экзамены каталога."""
    return await list_items(session, Exam, limit=0)


async def get_student(session: AsyncSession, student_id: uuid.UUID) -> Student:
    """
    Получить студента по ID.

    Raises:
        NotFoundError: Если студент не найден
    """
    return await get_item(session, Student, student_id)


async def get_question(session: AsyncSession, question_id: int) -> Optional[Question]:
    """Получить вопрос по ID или None."""
    return await session.get(Question, question_id)


async def count_questions(session: AsyncSession, exam_id: int) -> int:
    """Количество вопросов в экзамене."""
    stmt = select(func.count(Question.id)).where(Question.exam_id == exam_id)
    return (await session.execute(stmt)).scalar_one()


async def get_questions_page(
    session: AsyncSession, exam_id: int, page: int, size: int
) -> Tuple[List[Question], int]:
    """
    Получить страницу вопросов экзамена в порядке ID.

    Args:
        session: Сессия базы данных
        exam_id: ID экзамена
        page: Номер страницы, начиная с 0
        size: Размер страницы

    Returns:
        Кортеж (вопросы страницы, общее количество вопросов экзамена)
    """
    total = await count_questions(session, exam_id)
    stmt = (
        select(Question)
        .where(Question.exam_id == exam_id)
        .order_by(Question.id)
        .offset(page * size)
        .limit(size)
    )
    questions = list((await session.execute(stmt)).scalars().all())
    logger.debug(
        f"Экзамен {exam_id}: страница {page} (size={size}), "
        f"{len(questions)} из {total} вопросов"
    )
    return questions, total
