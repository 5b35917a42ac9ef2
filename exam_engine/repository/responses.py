# -*- coding: utf-8 -*-
"""
Репозиторий ответов студентов.

Уникальность ответа на пару (сессия, вопрос) обеспечивается ограничением
``uc_session_question``; здесь только чтение и запись строк.
"""

import uuid
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from exam_engine.config.logger import configure_logger
from exam_engine.domain.models import Question, StudentResponse
from exam_engine.utils.clock import utcnow

logger = configure_logger(__name__)


async def get_responses_for_session(
    session: AsyncSession, session_id: uuid.UUID
) -> List[StudentResponse]:
    """Все ответы сессии вместе с их вопросами, в порядке ID вопроса."""
    stmt = (
        select(StudentResponse)
        .where(StudentResponse.session_id == session_id)
        .options(selectinload(StudentResponse.question))
        .order_by(StudentResponse.question_id)
        .execution_options(populate_existing=True)
    )
    return list((await session.execute(stmt)).scalars().all())


async def get_chosen_by_question(
    session: AsyncSession, session_id: uuid.UUID
) -> Dict[int, Optional[int]]:
    """Словарь {question_id: chosen_index} для сессии."""
    stmt = select(StudentResponse.question_id, StudentResponse.chosen_index).where(
        StudentResponse.session_id == session_id
    )
    rows = (await session.execute(stmt)).all()
    return {question_id: chosen_index for question_id, chosen_index in rows}


async def find_response(
    session: AsyncSession, session_id: uuid.UUID, question_id: int
) -> Optional[StudentResponse]:
    """Найти ответ по паре (сессия, вопрос)."""
    stmt = (
        select(StudentResponse)
        .where(
            StudentResponse.session_id == session_id,
            StudentResponse.question_id == question_id,
        )
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


def apply_choice(
    response: StudentResponse, question: Question, chosen_index: Optional[int]
) -> StudentResponse:
    """Записать выбор и пересчитать кэшированный флаг правильности."""
    response.chosen_index = chosen_index
    response.is_correct = (
        chosen_index is not None
        and question.correct_index is not None
        and chosen_index == question.correct_index
    )
    response.submitted_at = utcnow()
    return response


async def insert_response(
    session: AsyncSession,
    session_id: uuid.UUID,
    question: Question,
    chosen_index: Optional[int],
) -> StudentResponse:
    """
    Вставить новый ответ внутри SAVEPOINT.

    Raises:
        IntegrityError: Если ответ на этот вопрос уже записан параллельно
    """
    async with session.begin_nested():
        response = StudentResponse(session_id=session_id, question_id=question.id)
        apply_choice(response, question, chosen_index)
        session.add(response)
        await session.flush()
    return response


async def count_answered(session: AsyncSession, session_id: uuid.UUID) -> int:
    """Количество ответов сессии с выбранным вариантом."""
    stmt = select(func.count(StudentResponse.id)).where(
        StudentResponse.session_id == session_id,
        StudentResponse.chosen_index.is_not(None),
    )
    return (await session.execute(stmt)).scalar_one()
