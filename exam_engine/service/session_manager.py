# -*- coding: utf-8 -*-
"""
Сервис создания и получения экзаменационных сессий.

У студента одновременно может быть не более одной STARTED-сессии.
Проверка "найти активную, иначе создать" подстрахована частичным
уникальным индексом: проигравший гонку INSERT получает IntegrityError,
после чего возвращается сессия победителя.
"""

import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import atomic
from exam_engine.config.logger import configure_logger
from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.lifecycle import is_terminal
from exam_engine.domain.models import Exam, ExamSession
from exam_engine.domain.results import (ExamHistoryEntry, ExamSummary,
                                        SessionHandle, SessionView)
from exam_engine.repository.catalog import get_exam, get_student, list_exams
from exam_engine.repository.sessions import (find_active_session,
                                             get_session_by_id, insert_session,
                                             list_sessions_by_status)
from exam_engine.service.scoring import ScoringEngine, build_report_url
from exam_engine.utils.clock import utcnow
from exam_engine.utils.exceptions import BadRequestError, ConflictError

logger = configure_logger(__name__)


def _to_handle(
    exam_session: ExamSession, exam: Exam, is_existing: bool
) -> SessionHandle:
    return SessionHandle(
        session_id=exam_session.id,
        exam_id=exam.id,
        duration_seconds=exam.time_limit_seconds,
        start_time=exam_session.start_time,
        is_existing=is_existing,
    )


class SessionManager:
    """Сервис жизненного цикла: начало и чтение сессий"""

    @staticmethod
    async def start_session(
        session: AsyncSession, student_id: uuid.UUID, exam_id: Optional[int]
    ) -> SessionHandle:
        """
        Начать экзамен для студента.

        Если у студента уже есть STARTED-сессия, она возвращается без изменений.

        Args:
            session: Сессия базы данных
            student_id: ID студента
            exam_id: ID экзамена

        Returns:
            Дескриптор сессии: ID, лимит времени, время начала

        Raises:
            BadRequestError: Если ID экзамена не передан
            NotFoundError: Если студент или экзамен не найдены
        """
        if exam_id is None:
            raise BadRequestError("Требуется ID экзамена")

        logger.info(f"🚀 Начало сессии: студент {student_id}, экзамен {exam_id}")

        try:
            async with atomic(session):
                await get_student(session, student_id)
                exam = await get_exam(session, exam_id)

                existing = await find_active_session(session, student_id)
                if existing is not None:
                    logger.info(
                        f"♻️ У студента {student_id} уже есть активная сессия "
                        f"{existing.id}, возвращаем ее"
                    )
                    existing_exam = await get_exam(session, existing.exam_id)
                    return _to_handle(existing, existing_exam, is_existing=True)

                created = await insert_session(session, exam.id, student_id)
                handle = _to_handle(created, exam, is_existing=False)
        except IntegrityError:
            # Параллельный запрос успел создать сессию раньше нас
            logger.warning(
                f"⚠️ Гонка при создании сессии для студента {student_id}, "
                f"перечитываем активную сессию"
            )
            async with atomic(session):
                winner = await find_active_session(session, student_id)
                if winner is None:
                    raise ConflictError(
                        "Не удалось начать сессию, повторите запрос"
                    )
                winner_exam = await get_exam(session, winner.exam_id)
                return _to_handle(winner, winner_exam, is_existing=True)

        logger.info(
            f"✅ Создана сессия {handle.session_id}: студент {student_id}, "
            f"экзамен {exam_id}, лимит {handle.duration_seconds} сек"
        )
        return handle

    @staticmethod
    async def get_session(session: AsyncSession, session_id: uuid.UUID) -> ExamSession:
        """
        Получить сессию по ID.

        Raises:
            NotFoundError: Если сессия не найдена
        """
        return await get_session_by_id(session, session_id, refresh=True)

    @staticmethod
    async def get_session_view(
        session: AsyncSession, session_id: uuid.UUID
    ) -> SessionView:
        """Текущее состояние сессии для клиента."""
        exam_session = await SessionManager.get_session(session, session_id)
        return SessionView(
            session_id=exam_session.id,
            exam_id=exam_session.exam_id,
            student_id=exam_session.student_id,
            status=exam_session.status,
            start_time=exam_session.start_time,
            submit_time=exam_session.submit_time,
            is_terminal=is_terminal(exam_session.status),
        )

    @staticmethod
    async def list_exams(session: AsyncSession) -> List[ExamSummary]:
        """Список экзаменов, доступных для начала."""
        exams = await list_exams(session)
        return [
            ExamSummary(
                id=exam.id,
                title=exam.title,
                time_limit_seconds=exam.time_limit_seconds,
            )
            for exam in exams
        ]

    @staticmethod
    async def get_exam_history(
        session: AsyncSession, student_id: uuid.UUID
    ) -> List[ExamHistoryEntry]:
        """
        История завершенных экзаменов студента с итоговым баллом.

        Raises:
            NotFoundError: Если студент не найден
        """
        await get_student(session, student_id)
        completed = await list_sessions_by_status(
            session, student_id, SessionStatus.COMPLETED
        )
        logger.debug(
            f"Студент {student_id}: найдено {len(completed)} завершенных сессий"
        )

        history = []
        for exam_session in completed:
            exam = await get_exam(session, exam_session.exam_id)
            result = await ScoringEngine.calculate_result(session, exam_session.id)
            history.append(
                ExamHistoryEntry(
                    session_id=exam_session.id,
                    exam_title=exam.title,
                    score=result.total_correct,
                    total_questions=result.total_questions,
                    date=exam_session.submit_time or utcnow(),
                    report_url=build_report_url(exam_session.id),
                )
            )
        return history


__all__ = ["SessionManager"]
