# -*- coding: utf-8 -*-
"""
exam_engine/config/settings.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Конфигурация настроек приложения с использованием Pydantic.

Этот модуль загружает конфигурацию из .env файла, предоставляя централизованную
систему управления настройками для всех окружений.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

"""Загрузка .env производится ТОЛЬКО если файл существует.
В контейнере используем переменные окружения, переданные Docker/Compose.
"""
# Корень проекта (каталог с pyproject.toml)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

ROOT_ENV_PATH = (BASE_DIR.parent / ".env").resolve()
PROJECT_ENV_PATH = (BASE_DIR / ".env").resolve()


class Settings(BaseSettings):
    """Настройки приложения, загружаемые из .env файла."""

    # Приоритет: 1) переменные окружения, 2) .env проекта, 3) корневой .env
    _env_file = None
    if PROJECT_ENV_PATH.exists():
        _env_file = PROJECT_ENV_PATH
    elif ROOT_ENV_PATH.exists():
        _env_file = ROOT_ENV_PATH

    model_config = SettingsConfigDict(
        env_file=_env_file,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Конфигурация базы данных
    database_url: str | None = None
    postgres_db: str = "exams"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # Конфигурация приложения
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Конфигурация логирования
    log_file: str | None = None

    # Создавать таблицы при старте (в проде схемой управляет alembic)
    auto_create_tables: bool = True

    # Конфигурация CORS
    cors_allow_origins: str = ""
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,PUT,OPTIONS"
    cors_allow_headers: str = "Authorization,Content-Type"

    # Постраничная выдача вопросов
    questions_page_size_default: int = 5
    questions_page_size_max: int = 20
    questions_page_max: int = 10000

    # Истечение брошенных сессий
    session_expiry_hours: int = 24
    expiry_sweep_enabled: bool = True
    expiry_sweep_interval_seconds: int = 86400

    # Базовый путь, по которому сервис отчетов отдает документ сессии
    reports_base_path: str = "/api/v1/reports"

    def get_allowed_origins(self) -> list[str]:
        """Формирует список разрешённых origins для CORS."""
        if self.cors_allow_origins:
            return [
                origin.strip()
                for origin in self.cors_allow_origins.split(",")
                if origin.strip()
            ]
        return ["*"]

    def get_cors_methods(self) -> list[str]:
        """Возвращает список разрешённых HTTP методов для CORS."""
        if self.cors_allow_methods == "*":
            return ["*"]
        return [
            method.strip()
            for method in self.cors_allow_methods.split(",")
            if method.strip()
        ]

    def get_cors_headers(self) -> list[str]:
        """Возвращает список разрешённых заголовков для CORS."""
        if self.cors_allow_headers == "*":
            return ["*"]
        return [
            header.strip()
            for header in self.cors_allow_headers.split(",")
            if header.strip()
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Build database URL from components if not provided directly
        if not self.database_url:
            self.database_url = self._build_database_url()

    def _build_database_url(self) -> str:
        """Build database URL from individual components."""
        driver = "postgresql+asyncpg"
        return f"{driver}://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    def get_config_source(self) -> str:
        """Возвращает информацию об источнике конфигурации для отладки."""
        if PROJECT_ENV_PATH.exists():
            return f"project: {PROJECT_ENV_PATH}"
        elif ROOT_ENV_PATH.exists():
            return f"root: {ROOT_ENV_PATH}"
        else:
            return "environment variables only"


settings = Settings()
