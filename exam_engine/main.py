# -*- coding: utf-8 -*-
"""
Точка входа FastAPI-приложения сервиса экзаменов.
"""

import asyncio

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from exam_engine.api.v1.exams import router as exams_router
from exam_engine.api.v1.reports import router as reports_router
from exam_engine.api.v1.students import router as students_router
from exam_engine.clients.database_client import (AsyncSessionLocal,
                                                 async_engine, init_db)
from exam_engine.config.logger import configure_logger, get_system_logger
from exam_engine.config.settings import settings
from exam_engine.config.uvicorn_config import (get_uvicorn_config,
                                               setup_uvicorn_logging)
from exam_engine.service.expiry import run_expiry_loop

logger = configure_logger(__name__)
system_logger = get_system_logger()

app = FastAPI(
    title="Exam Engine API",
    description="API прохождения экзаменов: сессии, ответы, результаты",
    version="0.1.0",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json",
    openapi_tags=[
        {"name": "📝 Экзамены", "description": "Прохождение экзамена студентом"},
        {"name": "📄 Отчеты", "description": "Данные отчетов по завершенным сессиям"},
        {"name": "🎓 Студенты", "description": "История экзаменов студента"},
    ],
)

# Настройка CORS из настроек
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.get_cors_methods(),
    allow_headers=settings.get_cors_headers(),
)


# Middleware для логирования всех запросов
@app.middleware("http")
async def log_all_requests(request, call_next):
    if request.url.path.startswith("/api/"):
        logger.info(f"🌐 API запрос: {request.method} {request.url.path}")

    try:
        response = await call_next(request)

        if request.url.path.startswith("/api/"):
            if response.status_code >= 400:
                logger.warning(
                    f"❌ API ошибка: {request.method} {request.url.path} → {response.status_code}"
                )
            else:
                logger.info(
                    f"✅ API ответ: {request.method} {request.url.path} → {response.status_code}"
                )

        return response

    except Exception:
        if request.url.path.startswith("/api/"):
            logger.exception(
                f"💥 Критическая ошибка API: {request.method} {request.url.path}"
            )
        raise


app.include_router(exams_router, prefix="/api/v1/exams", tags=["📝 Экзамены"])
app.include_router(reports_router, prefix="/api/v1/reports", tags=["📄 Отчеты"])
app.include_router(students_router, prefix="/api/v1/students", tags=["🎓 Студенты"])

_background_tasks: set[asyncio.Task] = set()


@app.on_event("startup")
async def startup_event():
    setup_uvicorn_logging()

    system_logger.info("🔧 Инициализация сервисов...")
    system_logger.info(f"⚙️ Конфигурация: {settings.get_config_source()}")

    # Проверяем подключение к базе данных
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("✅ База данных подключена")
    except Exception as e:
        logger.error(f"❌ Ошибка подключения к базе данных: {e}")
        raise

    if settings.auto_create_tables:
        await init_db()

    # Фоновая задача: периодическое истечение брошенных сессий
    if settings.expiry_sweep_enabled:
        task = asyncio.create_task(run_expiry_loop(AsyncSessionLocal))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    system_logger.info("🎉 Все сервисы готовы к работе!")


@app.on_event("shutdown")
async def shutdown_event():
    """Обработчик завершения приложения"""
    logger.info("🛑 Завершение работы Exam Engine API")
    for task in list(_background_tasks):
        task.cancel()
    await async_engine.dispose()


@app.get("/api/v1")
async def api_root():
    """Корневой эндпоинт API."""
    return {"message": "Exam Engine API работает", "version": app.version}


@app.get("/api/v1/health")
async def api_health():
    """Проверка живости приложения."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(**get_uvicorn_config())
