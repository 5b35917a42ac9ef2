# -*- coding: utf-8 -*-
"""
Сервис подсчета результатов и завершения экзамена.

Результат никогда не хранится: он каждый раз пересчитывается из текущих
ответов и правильных индексов вопросов, поэтому повторные вызовы дают
одинаковые числа (кроме момента расчета).
"""

import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import atomic
from exam_engine.config.logger import configure_logger
from exam_engine.config.settings import settings
from exam_engine.domain.enums import SessionStatus, Subject
from exam_engine.domain.lifecycle import ensure_status, ensure_transition
from exam_engine.domain.models import StudentResponse
from exam_engine.domain.results import ExamResult, ReportLocator, SubjectScore
from exam_engine.repository.responses import get_responses_for_session
from exam_engine.repository.sessions import get_session_by_id, transition_status
from exam_engine.utils.clock import utcnow
from exam_engine.utils.exceptions import ConflictError

logger = configure_logger(__name__)


def build_report_url(session_id: uuid.UUID) -> str:
    """Адрес, по которому сервис отчетов отдает документ сессии."""
    return f"{settings.reports_base_path.rstrip('/')}/{session_id}"


def percentage(correct: int, total: int) -> float:
    """Процент правильных ответов; 0 при пустом знаменателе."""
    if total == 0:
        return 0.0
    return correct / total * 100


class ScoringEngine:
    """Подсчет баллов по предметам и итогового результата"""

    @staticmethod
    def score_responses(
        responses: Iterable[StudentResponse], completed_at: Optional[datetime] = None
    ) -> ExamResult:
        """
        Посчитать результат по набору ответов.

        Для каждого ответа с вопросом: total предмета +1; correct +1, если
        выбранный индекс задан и совпадает с правильным индексом вопроса.
        Кэшированный флаг is_correct не используется.
        """
        totals: Dict[Subject, int] = {subject: 0 for subject in Subject}
        correct: Dict[Subject, int] = {subject: 0 for subject in Subject}

        for response in responses:
            question = response.question
            if question is None:
                continue
            totals[question.subject] += 1
            if (
                response.chosen_index is not None
                and response.chosen_index == question.correct_index
            ):
                correct[question.subject] += 1

        subjects: List[SubjectScore] = [
            SubjectScore(
                subject=subject,
                correct=correct[subject],
                total=totals[subject],
                percentage=percentage(correct[subject], totals[subject]),
            )
            for subject in Subject
        ]

        total_correct = sum(correct.values())
        total_questions = sum(totals.values())
        return ExamResult(
            subjects=subjects,
            total_correct=total_correct,
            total_questions=total_questions,
            total_percentage=percentage(total_correct, total_questions),
            completed_at=completed_at or utcnow(),
        )

    @staticmethod
    async def calculate_result(
        session: AsyncSession, session_id: uuid.UUID
    ) -> ExamResult:
        """
        Посчитать результат сессии. Только чтение, допустимо в любом статусе.

        Raises:
            NotFoundError: Если сессия не найдена
        """
        await get_session_by_id(session, session_id)
        responses = await get_responses_for_session(session, session_id)
        result = ScoringEngine.score_responses(responses)
        logger.debug(
            f"📊 Результат сессии {session_id}: {result.total_correct}/"
            f"{result.total_questions} ({result.total_percentage:.2f}%)"
        )
        return result

    @staticmethod
    async def finish(session: AsyncSession, session_id: uuid.UUID) -> ReportLocator:
        """
        Завершить отправленную сессию (SUBMITTED -> COMPLETED).

        Фиксация статуса - точка подтверждения; расчет результата после нее
        идемпотентен и может быть повторен через получение результата.

        Raises:
            NotFoundError: Если сессия не найдена
            ConflictError: Если сессия не в статусе SUBMITTED
        """
        logger.info(f"🏁 Завершение сессии {session_id}")

        async with atomic(session):
            exam_session = await get_session_by_id(session, session_id, refresh=True)
            ensure_transition(exam_session.status, SessionStatus.COMPLETED)

            changed = await transition_status(
                session, session_id, SessionStatus.SUBMITTED, SessionStatus.COMPLETED
            )
            if not changed:
                logger.warning(
                    f"⚠️ Сессия {session_id} изменила статус параллельно, "
                    f"завершение отклонено"
                )
                raise ConflictError("Перед завершением сессия должна быть отправлена")

        result = await ScoringEngine.calculate_result(session, session_id)
        logger.info(
            f"✅ Сессия {session_id} завершена: {result.total_correct}/"
            f"{result.total_questions} ({result.total_percentage:.2f}%)"
        )
        return ReportLocator(report_url=build_report_url(session_id))

    @staticmethod
    async def get_report_locator(
        session: AsyncSession, session_id: uuid.UUID
    ) -> ReportLocator:
        """
        Адрес отчета уже завершенной сессии.

        Raises:
            NotFoundError: Если сессия не найдена
            ConflictError: Если сессия еще не завершена
        """
        exam_session = await get_session_by_id(session, session_id, refresh=True)
        ensure_status(
            exam_session.status, SessionStatus.COMPLETED, "получить отчет"
        )
        return ReportLocator(report_url=build_report_url(session_id))


__all__ = ["ScoringEngine", "build_report_url", "percentage"]
