#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Скрипт пометки брошенных сессий как EXPIRED.

Предназначен для запуска по расписанию (cron), если фоновая задача
приложения отключена (EXPIRY_SWEEP_ENABLED=false).

Пример:
    python scripts/expire_sessions.py --hours 24
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Добавляем корень проекта в sys.path
sys.path.append(str(Path(__file__).parent.parent))

from exam_engine.clients.database_client import AsyncSessionLocal  # noqa: E402
from exam_engine.config.logger import configure_logger  # noqa: E402
from exam_engine.service.expiry import ExpiryPolicy  # noqa: E402

logger = configure_logger(__name__)


async def expire_sessions(hours: int | None) -> int:
    """Однократный прогон политики истечения."""
    async with AsyncSessionLocal() as session:
        return await ExpiryPolicy.sweep_abandoned(session, hours)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Пометить брошенные сессии как EXPIRED")
    parser.add_argument(
        "--hours",
        type=int,
        default=None,
        help="Возраст сессии в часах (по умолчанию SESSION_EXPIRY_HOURS)",
    )
    args = parser.parse_args()

    try:
        count = asyncio.run(expire_sessions(args.hours))
        print(f"✅ Истекших сессий: {count}")
    except Exception as e:
        logger.error(f"Ошибка при пометке брошенных сессий: {e}")
        print(f"❌ Ошибка: {e}")
        sys.exit(1)
