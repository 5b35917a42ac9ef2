# -*- coding: utf-8 -*-
"""
Маршруты FastAPI для истории экзаменов студента.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from exam_engine.clients.database_client import get_db
from exam_engine.config.logger import configure_logger
from exam_engine.domain.results import ExamHistoryEntry
from exam_engine.service.session_manager import SessionManager

router = APIRouter()
logger = configure_logger(__name__)


@router.get("/{student_id}/history", response_model=List[ExamHistoryEntry])
async def get_history_endpoint(
    student_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> List[ExamHistoryEntry]:
    """
    История завершенных экзаменов студента.

    Raises:
        HTTPException: Если студент не найден или выборка не удалась
    """
    try:
        history = await SessionManager.get_exam_history(session, student_id)
        logger.info(f"📚 История студента {student_id}: {len(history)} экзаменов")
        return history
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get history for student {student_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ошибка получения истории экзаменов",
        )
