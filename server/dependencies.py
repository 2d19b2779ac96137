"""
Habit Tracker API - Dependencies
Провайдеры зависимостей для FastAPI роутеров
"""

from fastapi import Request

from core.database import JSONStorage

def get_storage(request: Request) -> JSONStorage:
    """Хранилище, созданное при запуске и переданное в create_app"""
    return request.app.state.storage
