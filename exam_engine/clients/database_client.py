# -*- coding: utf-8 -*-
"""
Клиент для работы с базой данных.

Содержит асинхронный движок, фабрику сессий, зависимость FastAPI и
явную транзакционную границу ``atomic`` для изменяющих операций.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from exam_engine.config.logger import configure_logger
from exam_engine.config.settings import settings
from exam_engine.domain.models import Base

logger = configure_logger(__name__)


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Настраивает SQLite-движок для корректной работы SAVEPOINT и внешних ключей.

    Драйвер sqlite сам управляет BEGIN, из-за чего вложенные транзакции
    работают некорректно; отключаем это и отправляем BEGIN явно.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _create_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=False)
        enable_sqlite_savepoints(engine)
        return engine
    return create_async_engine(
        url,
        echo=False,  # Отключаем логирование SQL запросов в продакшене
        pool_pre_ping=True,  # Проверяем соединение перед использованием
        pool_recycle=3600,  # Переподключаемся каждый час
    )


async_engine = _create_engine(settings.database_url)

# Создаем фабрику асинхронных сессий
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Предоставляет асинхронную сессию базы данных для внедрения зависимостей в FastAPI.

    Yields:
        AsyncSession: Активная сессия базы данных
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Выполняет блок атомарно: фиксирует изменения при успехе и откатывает
    все изменения блока при любом исключении.

    Example:
        async with atomic(session):
            ...
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def init_db() -> None:
    """
    Создает все определенные таблицы, если их еще нет.

    Raises:
        SQLAlchemyError: Ошибки при создании таблиц
        OperationalError: Ошибки подключения к базе данных
    """
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Схема базы данных проверена")
