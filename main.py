#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Tracker API - точка входа
Загружает хранилище, собирает FastAPI приложение и запускает uvicorn

Версия: 1.0.0
Дата: 2026-10-19
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from config import get_settings
from core.database import JSONStorage, DatabaseError
from server.app import create_app
from utils.datetime_utils import set_timezone
from utils.logger import setup_logger
from utils.process_lock import ensure_single_instance

logger = logging.getLogger(__name__)

def main():
    """Главная функция запуска сервера"""
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Habit Tracker API server')
    parser.add_argument('--host', default=settings.HOST, help='Хост сервера')
    parser.add_argument('--port', type=int, default=settings.PORT, help='Порт сервера')
    parser.add_argument('--data-file', type=Path, default=settings.DATA_FILE, help='JSON файл данных')
    args = parser.parse_args()

    settings.DATA_FILE = args.data_file

    setup_logger(settings)
    set_timezone(settings.TIMEZONE)

    lock = ensure_single_instance(settings.lock_file)
    try:
        try:
            storage = JSONStorage(settings.DATA_FILE)
        except DatabaseError as e:
            logger.error(f"Failed to initialize storage: {e}")
            sys.exit(1)

        app = create_app(storage, settings)

        logger.info(f"Server starting on {args.host}:{args.port}")
        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_level=settings.LOG_LEVEL.lower(),
            server_header=False
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    finally:
        lock.release()

if __name__ == "__main__":
    main()
