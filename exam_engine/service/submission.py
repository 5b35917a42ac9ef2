# -*- coding: utf-8 -*-
"""
Сервис отправки экзамена (STARTED -> SUBMITTED).
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import atomic
from exam_engine.config.logger import configure_logger
from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.lifecycle import ensure_transition
from exam_engine.domain.results import SubmissionSummary
from exam_engine.repository.catalog import count_questions
from exam_engine.repository.responses import count_answered
from exam_engine.repository.sessions import get_session_by_id, transition_status
from exam_engine.utils.clock import utcnow
from exam_engine.utils.exceptions import ConflictError

logger = configure_logger(__name__)


class SubmissionCoordinator:
    """Однократная отправка ответов сессии"""

    @staticmethod
    async def submit(
        session: AsyncSession, session_id: uuid.UUID
    ) -> SubmissionSummary:
        """
        Отправить экзамен.

        Переход выполняется условным UPDATE: если сессию параллельно
        отправили или пометили истекшей, вызов завершается конфликтом.

        Args:
            session: Сессия базы данных
            session_id: ID экзаменационной сессии

        Returns:
            Количество отвеченных, всего и неотвеченных вопросов

        Raises:
            NotFoundError: Если сессия не найдена
            ConflictError: Если сессия не в статусе STARTED
        """
        logger.info(f"📤 Отправка сессии {session_id}")

        async with atomic(session):
            exam_session = await get_session_by_id(session, session_id, refresh=True)
            ensure_transition(exam_session.status, SessionStatus.SUBMITTED)
            exam_id = exam_session.exam_id

            changed = await transition_status(
                session,
                session_id,
                SessionStatus.STARTED,
                SessionStatus.SUBMITTED,
                submit_time=utcnow(),
            )
            if not changed:
                logger.warning(
                    f"⚠️ Сессия {session_id} изменила статус параллельно, "
                    f"отправка отклонена"
                )
                raise ConflictError("Сессия уже отправлена или не начата")

            answered = await count_answered(session, session_id)
            total = await count_questions(session, exam_id)

        summary = SubmissionSummary(
            answered_count=answered,
            total_count=total,
            unanswered_count=max(total - answered, 0),
        )
        logger.info(
            f"✅ Сессия {session_id} отправлена: отвечено {summary.answered_count} "
            f"из {summary.total_count}"
        )
        return summary


__all__ = ["SubmissionCoordinator"]
