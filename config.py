#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Tracker API - Configuration
Настройки сервиса из переменных окружения и файла .env

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Настройки Habit Tracker API"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(
        default="Habit Tracker API",
        description="Название приложения"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Версия API"
    )

    DEBUG: bool = Field(
        default=False,
        description="Режим отладки"
    )

    # ===== СЕТЕВЫЕ НАСТРОЙКИ =====

    HOST: str = Field(
        default="0.0.0.0",
        description="Хост для запуска сервера"
    )

    PORT: int = Field(
        default=3000,
        description="Порт для запуска сервера"
    )

    ALLOWED_ORIGINS: List[str] = Field(
        default=["*"],
        description="Разрешенные источники для CORS"
    )

    # ===== ДАННЫЕ =====

    DATA_FILE: Path = Field(
        default=Path("data/habits.json"),
        description="JSON файл с привычками, целями и отметками"
    )

    TIMEZONE: Optional[str] = Field(
        default=None,
        description="Часовой пояс (IANA), пусто - локальное время системы"
    )

    # ===== ЛОГИРОВАНИЕ =====

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Уровень логирования (DEBUG/INFO/WARNING/ERROR/CRITICAL)"
    )

    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Формат логов"
    )

    LOG_FILE: Optional[Path] = Field(
        default=None,
        description="Файл логов с ротацией (пусто - только консоль)"
    )

    LOG_MAX_BYTES: int = Field(
        default=10_000_000,
        description="Максимальный размер файла логов"
    )

    LOG_BACKUP_COUNT: int = Field(
        default=5,
        description="Количество архивных файлов логов"
    )

    # ===== ВАЛИДАТОРЫ =====

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @property
    def lock_file(self) -> Path:
        """Файл межпроцессной блокировки рядом с файлом данных"""
        return self.DATA_FILE.with_name(self.DATA_FILE.name + ".lock")

@lru_cache()
def get_settings() -> Settings:
    """Получить настройки (кэшируются на время жизни процесса)"""
    return Settings()
