# -*- coding: utf-8 -*-
"""
Политика истечения брошенных сессий.

Сама политика - идемпотентная пакетная операция; расписание ее запуска
задается снаружи (фоновая задача приложения или cron-скрипт).
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exam_engine.clients.database_client import atomic
from exam_engine.config.logger import configure_logger
from exam_engine.config.settings import settings
from exam_engine.repository.sessions import expire_started_before
from exam_engine.utils.clock import utcnow

logger = configure_logger(__name__)


class ExpiryPolicy:
    """Пометка EXPIRED для STARTED-сессий старше порога"""

    @staticmethod
    async def sweep(session: AsyncSession, cutoff: datetime) -> int:
        """
        Пометить EXPIRED все STARTED-сессии, начатые строго раньше ``cutoff``.

        Условие STARTED проверяется в самом UPDATE, поэтому сессия,
        отправленная параллельно, не будет перезаписана. Ответы не затрагиваются.

        Returns:
            Количество истекших сессий
        """
        logger.info(f"Начинаем пометку брошенных сессий (начатых до {cutoff})")

        async with atomic(session):
            expired_count = await expire_started_before(session, cutoff)

        if expired_count:
            logger.info(f"Помечено как EXPIRED {expired_count} сессий")
        else:
            logger.debug("Брошенных сессий не найдено")
        return expired_count

    @staticmethod
    async def sweep_abandoned(
        session: AsyncSession, lookback_hours: Optional[int] = None
    ) -> int:
        """Истечь сессии, начатые раньше, чем ``lookback_hours`` часов назад."""
        hours = (
            lookback_hours
            if lookback_hours is not None
            else settings.session_expiry_hours
        )
        cutoff = utcnow() - timedelta(hours=hours)
        return await ExpiryPolicy.sweep(session, cutoff)


async def run_expiry_loop(
    session_factory: async_sessionmaker,
    interval_seconds: Optional[int] = None,
    lookback_hours: Optional[int] = None,
) -> None:
    """
    Периодически запускать ``sweep_abandoned``.

    Ошибка одного прогона логируется и не останавливает цикл.
    """
    interval = interval_seconds or settings.expiry_sweep_interval_seconds
    logger.info(f"⏰ Запуск периодической очистки сессий, интервал {interval} сек")

    while True:
        try:
            async with session_factory() as session:
                await ExpiryPolicy.sweep_abandoned(session, lookback_hours)
        except Exception:
            logger.exception("❌ Ошибка периодической очистки сессий")
        await asyncio.sleep(interval)


__all__ = ["ExpiryPolicy", "run_expiry_loop"]
