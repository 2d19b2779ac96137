#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Tracker API - FastAPI Application
HTTP слой поверх JSON хранилища: роутеры, middleware, обработка ошибок

Версия: 1.0.0
Дата: 2026-10-19
"""

import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from core.database import JSONStorage, DatabaseError
from shared.models import HealthCheck
from .api import habits, goals, tracks, stats
from .dependencies import get_storage

logger = logging.getLogger(__name__)

API_ENDPOINTS = [
    "/api/v1/habits",
    "/api/v1/goals",
    "/api/v1/tracks",
    "/api/v1/statistics",
]

def _validation_message(exc: RequestValidationError) -> str:
    """Текст первой ошибки валидации для ответа клиенту"""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"

    error = errors[0]
    loc = [str(part) for part in error.get("loc", ())]

    if error.get("type") == "value_error":
        message = str(error.get("ctx", {}).get("error") or error.get("msg", ""))
        return message.removeprefix("Value error, ")
    if loc and loc[0] == "path":
        # habit_id -> Invalid habit ID
        return f"Invalid {loc[-1].replace('_id', '')} ID"
    if error.get("type") == "json_invalid" or loc == ["body"]:
        return "Invalid request body"
    if error.get("type") == "missing":
        return f"{loc[-1]} is required"
    return f"Invalid {loc[-1] if loc else 'request'}: {error.get('msg')}"

def create_app(storage: JSONStorage, settings: Optional[Settings] = None) -> FastAPI:
    """Создать приложение поверх уже открытого хранилища"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.APP_NAME} v{settings.VERSION} started, data file: {storage.data_file}")
        yield
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Habits, goals and daily habit tracks with aggregate statistics",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )
    app.state.storage = storage

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов и время обработки"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response

    # ===== ОБРАБОТКА ОШИБОК =====

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        if exc.status_code == 404 and detail == "Not Found":
            detail = "Endpoint not found"
        return JSONResponse(status_code=exc.status_code, content={"error": detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request: Request, exc: DatabaseError):
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal storage error"})

    # ===== РОУТЕРЫ =====

    app.include_router(habits.router)
    app.include_router(goals.router)
    app.include_router(tracks.router)
    app.include_router(stats.router)

    # ===== СЛУЖЕБНЫЕ МАРШРУТЫ =====

    @app.get("/")
    async def root():
        """Информация об API"""
        return {
            "message": f"{settings.APP_NAME} is running",
            "version": settings.VERSION,
            "endpoints": API_ENDPOINTS
        }

    @app.get("/health", response_model=HealthCheck)
    def health_check(storage: JSONStorage = Depends(get_storage)):
        """Health check для мониторинга"""
        return HealthCheck(
            status="healthy",
            service=settings.APP_NAME,
            version=settings.VERSION,
            timestamp=time.time(),
            storage=storage.get_health_status()
        )

    @app.get("/ping")
    async def ping():
        return {
            "message": "pong",
            "timestamp": time.time()
        }

    return app
