# -*- coding: utf-8 -*-
"""
Единый источник текущего времени.

Все временные метки в БД хранятся как naive UTC.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Текущее время в UTC без tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
