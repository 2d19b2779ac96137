import logging

from config import Settings
from utils.logger import setup_logger


def test_setup_logger_is_idempotent(tmp_path):
    settings = Settings(_env_file=None, LOG_FILE=tmp_path / "logs" / "api.log", LOG_LEVEL="WARNING")
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level

    try:
        setup_logger(settings)
        setup_logger(settings)

        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert root.level == logging.WARNING

        logging.getLogger("tests").warning("written to file")
        for handler in added:
            handler.flush()
        assert "written to file" in (tmp_path / "logs" / "api.log").read_text(encoding="utf-8")
    finally:
        for handler in [h for h in root.handlers if h not in before]:
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)
