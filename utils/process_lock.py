import os
import sys
import logging
from pathlib import Path
from typing import Optional, IO

logger = logging.getLogger(__name__)

class ProcessLock:
    """Межпроцессная блокировка файла данных: один сервис на один JSON файл"""

    def __init__(self, lockfile: Path):
        self.lockfile = Path(lockfile)
        self.fp: Optional[IO[str]] = None
        self.pid: Optional[int] = None

        self.lockfile.parent.mkdir(exist_ok=True, parents=True)

    @property
    def is_locked(self) -> bool:
        return self.fp is not None

    def acquire(self) -> bool:
        """Захватывает блокировку; False если файл уже занят другим процессом"""
        fp = open(self.lockfile, "a+")
        try:
            if sys.platform == "win32":
                import msvcrt
                fp.seek(0)
                msvcrt.locking(fp.fileno(), msvcrt.LK_NBLCK, 1)
            else:
                import fcntl
                fcntl.flock(fp, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            fp.close()
            logger.warning(f"Lock {self.lockfile} is held by another process: {e}")
            return False

        self.pid = os.getpid()
        fp.seek(0)
        fp.truncate()
        fp.write(str(self.pid))
        fp.flush()
        self.fp = fp

        logger.info(f"Lock {self.lockfile} acquired (PID: {self.pid})")
        return True

    def release(self) -> None:
        """Освобождает блокировку"""
        if self.fp is None:
            return

        try:
            if sys.platform == "win32":
                import msvcrt
                self.fp.seek(0)
                msvcrt.locking(self.fp.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                import fcntl
                fcntl.flock(self.fp, fcntl.LOCK_UN)
        finally:
            self.fp.close()
            self.fp = None

        # Файл не удаляем: другой процесс мог уже открыть его и ждать
        logger.info(f"Lock {self.lockfile} released (PID: {self.pid})")

    def __enter__(self):
        if not self.acquire():
            raise RuntimeError(f"Data file is already in use: {self.lockfile}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

def ensure_single_instance(lockfile: Path) -> ProcessLock:
    """
    Гарантирует, что файл данных обслуживает только один процесс

    Raises:
        SystemExit: Если блокировка уже захвачена
    """
    lock = ProcessLock(lockfile)

    if not lock.acquire():
        logger.error(f"Another instance is already serving {lockfile}")
        sys.exit(1)

    return lock
