import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

_HANDLER_MARK = "_habit_tracker_handler"

def setup_logger(settings) -> logging.Logger:
    """Настроить корневой логгер: консоль и, если задан LOG_FILE, файл с ротацией"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.LOG_LEVEL))

    # Повторный вызов не должен дублировать обработчики
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(settings.LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARK, True)
    logger.addHandler(console)

    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)
        file_handler = RotatingFileHandler(
            settings.LOG_FILE,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)

    return logger
