# -*- coding: utf-8 -*-
"""
Репозиторий экзаменационных сессий.

Функции не фиксируют транзакцию сами: границу задает вызывающий сервис
через ``atomic``. Переходы статусов выполняются условным UPDATE, поэтому
из двух конкурирующих переходов побеждает только первый зафиксированный.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.config.logger import configure_logger
from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.models import ExamSession
from exam_engine.repository.base import get_item
from exam_engine.utils.clock import utcnow

logger = configure_logger(__name__)


async def get_session_by_id(
    session: AsyncSession, session_id: uuid.UUID, refresh: bool = False
) -> ExamSession:
    """
    Получить сессию по ID.

    Args:
        session: Сессия базы данных
        session_id: ID экзаменационной сессии
        refresh: Перечитать строку из БД, даже если объект уже в identity map

    Raises:
        NotFoundError: Если сессия не найдена
    """
    if refresh:
        stmt = (
            select(ExamSession)
            .where(ExamSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        exam_session = (await session.execute(stmt)).scalar_one_or_none()
        if exam_session is not None:
            return exam_session
    return await get_item(session, ExamSession, session_id)


async def find_active_session(
    session: AsyncSession, student_id: uuid.UUID
) -> Optional[ExamSession]:
    """Найти STARTED-сессию студента (по индексу их не больше одной)."""
    stmt = (
        select(ExamSession)
        .where(
            ExamSession.student_id == student_id,
            ExamSession.status == SessionStatus.STARTED,
        )
        .order_by(ExamSession.start_time)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalars().first()


async def list_sessions_by_status(
    session: AsyncSession, student_id: uuid.UUID, status: SessionStatus
) -> List[ExamSession]:
    """Все сессии студента в указанном статусе, от старых к новым."""
    stmt = (
        select(ExamSession)
        .where(ExamSession.student_id == student_id, ExamSession.status == status)
        .order_by(ExamSession.start_time)
        .execution_options(populate_existing=True)
    )
    return list((await session.execute(stmt)).scalars().all())


async def insert_session(
    session: AsyncSession, exam_id: int, student_id: uuid.UUID
) -> ExamSession:
    """
    Добавить новую STARTED-сессию и отправить INSERT в БД.

    Raises:
        IntegrityError: Если у студента уже есть STARTED-сессия
    """
    exam_session = ExamSession(
        exam_id=exam_id,
        student_id=student_id,
        status=SessionStatus.STARTED,
        start_time=utcnow(),
    )
    session.add(exam_session)
    await session.flush()
    return exam_session


async def transition_status(
    session: AsyncSession,
    session_id: uuid.UUID,
    from_status: SessionStatus,
    to_status: SessionStatus,
    **values,
) -> bool:
    """
    Условно перевести сессию из ``from_status`` в ``to_status``.

    Returns:
        True, если строка обновлена; False, если статус в БД уже другой
    """
    stmt = (
        update(ExamSession)
        .where(ExamSession.id == session_id, ExamSession.status == from_status)
        .values(status=to_status, **values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    changed = result.rowcount == 1
    logger.debug(
        f"Переход сессии {session_id}: {from_status.value} -> {to_status.value}, "
        f"обновлено: {changed}"
    )
    return changed


async def expire_started_before(session: AsyncSession, cutoff: datetime) -> int:
    """
    Пометить EXPIRED все STARTED-сессии, начатые строго раньше ``cutoff``.

    Returns:
        Количество обновленных сессий
    """
    stmt = (
        update(ExamSession)
        .where(
            ExamSession.status == SessionStatus.STARTED,
            ExamSession.start_time < cutoff,
        )
        .values(status=SessionStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount
