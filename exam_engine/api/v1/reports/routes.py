# -*- coding: utf-8 -*-
"""
Маршруты FastAPI для данных отчета по завершенной сессии.

Сам документ формирует внешний генератор; здесь отдаются только данные.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import get_db
from exam_engine.config.logger import configure_logger
from exam_engine.domain.results import ExamReport
from exam_engine.service.reports import build_report

router = APIRouter()
logger = configure_logger(__name__)


@router.get("/{session_id}", response_model=ExamReport)
async def get_report_endpoint(
    session_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> ExamReport:
    """Данные отчета; доступны только для завершенной сессии."""
    logger.debug(f"Report requested for session {session_id}")
    try:
        return await build_report(session, session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to build report for session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ошибка формирования отчета",
        )
