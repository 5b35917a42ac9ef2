# -*- coding: utf-8 -*-
"""
Подготовка данных отчета для внешнего генератора документов.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.config.logger import configure_logger
from exam_engine.domain.enums import SessionStatus
from exam_engine.domain.lifecycle import ensure_status
from exam_engine.domain.results import ExamReport
from exam_engine.repository.catalog import get_exam, get_student
from exam_engine.repository.sessions import get_session_by_id
from exam_engine.service.scoring import ScoringEngine

logger = configure_logger(__name__)


async def build_report(session: AsyncSession, session_id: uuid.UUID) -> ExamReport:
    """
    Собрать отчет завершенной сессии: имя студента, экзамен и результат.

    Raises:
        NotFoundError: Если сессия не найдена
        ConflictError: Если сессия еще не завершена
    """
    exam_session = await get_session_by_id(session, session_id, refresh=True)
    ensure_status(exam_session.status, SessionStatus.COMPLETED, "получить отчет")

    student = await get_student(session, exam_session.student_id)
    exam = await get_exam(session, exam_session.exam_id)
    result = await ScoringEngine.calculate_result(session, session_id)
    logger.debug(f"Отчет по сессии {session_id} подготовлен")

    return ExamReport(
        session_id=exam_session.id,
        student_name=student.display_name,
        exam_title=exam.title,
        result=result,
    )
