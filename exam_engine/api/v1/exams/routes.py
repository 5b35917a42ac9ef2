# -*- coding: utf-8 -*-
"""
Маршруты FastAPI для прохождения экзамена.

* GET  /api/v1/exams                          — список экзаменов
* POST /api/v1/exams/start                    — начать (или продолжить) сессию
* GET  /api/v1/exams/{session_id}             — состояние сессии
* GET  /api/v1/exams/{session_id}/questions   — страница вопросов
* PUT  /api/v1/exams/{session_id}/answers     — сохранить ответы
* POST /api/v1/exams/{session_id}/submit      — отправить экзамен
* POST /api/v1/exams/{session_id}/finish      — завершить и получить отчет
* GET  /api/v1/exams/{session_id}/report-url  — адрес отчета завершенной сессии
* GET  /api/v1/exams/{session_id}/result      — результат по предметам
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import get_db
from exam_engine.config.logger import configure_logger
from exam_engine.domain.results import (AnswerInput, ExamSummary, QuestionPage,
                                        ReportLocator, SessionHandle,
                                        SessionView, SubmissionSummary)
from exam_engine.service.answer_recorder import AnswerRecorder
from exam_engine.service.scoring import ScoringEngine
from exam_engine.service.session_manager import SessionManager
from exam_engine.service.submission import SubmissionCoordinator

from .schemas import ExamResultResponse, StartSessionRequest

router = APIRouter()
logger = configure_logger(__name__)


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@router.get("", response_model=List[ExamSummary])
async def list_exams_endpoint(
    session: AsyncSession = Depends(get_db),
) -> List[ExamSummary]:
    """Список доступных экзаменов."""
    try:
        return await SessionManager.list_exams(session)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list exams: {e}")
        raise _internal_error("Ошибка получения списка экзаменов")


@router.post("/start", response_model=SessionHandle)
async def start_exam_endpoint(
    payload: StartSessionRequest,
    session: AsyncSession = Depends(get_db),
) -> SessionHandle:
    """
    Начать экзамен.

    Если у студента уже есть незавершенная сессия, возвращается она
    с флагом ``is_existing``.
    """
    try:
        return await SessionManager.start_session(
            session, payload.student_id, payload.exam_id
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f"Failed to start exam {payload.exam_id} for student "
            f"{payload.student_id}: {e}"
        )
        raise _internal_error("Ошибка начала экзамена")


@router.get("/{session_id}", response_model=SessionView)
async def get_session_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> SessionView:
    """Состояние экзаменационной сессии."""
    try:
        return await SessionManager.get_session_view(session, session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get session {session_id}: {e}")
        raise _internal_error("Ошибка получения сессии")


@router.get("/{session_id}/questions", response_model=QuestionPage)
async def get_questions_endpoint(
    session_id: uuid.UUID,
    page: int = Query(0, description="Номер страницы, начиная с 0"),
    size: Optional[int] = Query(None, description="Размер страницы"),
    session: AsyncSession = Depends(get_db),
) -> QuestionPage:
    """Страница вопросов с выбранными студентом вариантами."""
    logger.debug(f"Questions page {page} (size={size}) for session {session_id}")
    try:
        return await AnswerRecorder.get_questions_page(
            session, session_id, page=page, size=size
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get questions for session {session_id}: {e}")
        raise _internal_error("Ошибка получения вопросов")


@router.put("/{session_id}/answers", status_code=status.HTTP_204_NO_CONTENT)
async def save_answers_endpoint(
    session_id: uuid.UUID,
    answers: List[AnswerInput],
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Сохранить ответы; повторный ответ на вопрос заменяет предыдущий."""
    try:
        await AnswerRecorder.save_answers(session, session_id, answers)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to save answers for session {session_id}: {e}")
        raise _internal_error("Ошибка сохранения ответов")


@router.post("/{session_id}/submit", response_model=SubmissionSummary)
async def submit_exam_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> SubmissionSummary:
    """Отправить экзамен; повторная отправка вернет 409."""
    try:
        return await SubmissionCoordinator.submit(session, session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to submit session {session_id}: {e}")
        raise _internal_error("Ошибка отправки экзамена")


@router.post("/{session_id}/finish", response_model=ReportLocator)
async def finish_exam_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> ReportLocator:
    """Завершить отправленный экзамен и получить адрес отчета."""
    try:
        return await ScoringEngine.finish(session, session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to finish session {session_id}: {e}")
        raise _internal_error("Ошибка завершения экзамена")


@router.get("/{session_id}/report-url", response_model=ReportLocator)
async def get_report_url_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> ReportLocator:
    """
    Адрес отчета уже завершенной сессии.

    Повторный ``finish`` возвращает 409, адрес отчета после сбоя
    клиент получает здесь.
    """
    try:
        return await ScoringEngine.get_report_locator(session, session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get report url for session {session_id}: {e}")
        raise _internal_error("Ошибка получения адреса отчета")


@router.get("/{session_id}/result", response_model=ExamResultResponse)
async def get_result_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> ExamResultResponse:
    """Результат сессии по предметам; пересчитывается при каждом запросе."""
    try:
        result = await ScoringEngine.calculate_result(session, session_id)
        return ExamResultResponse.from_result(result)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to calculate result for session {session_id}: {e}")
        raise _internal_error("Ошибка расчета результата")
