import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

import config


def setup_logging(log_file: Optional[str] = None, level: Optional[str] = None) -> None:
    log_formatter = logging.Formatter('%(asctime)s:%(levelname)s:%(name)s: %(message)s')
    log_level = getattr(logging, (level or config.LOG_LEVEL), logging.INFO)

    root_logger = logging.getLogger()
    # Already configured (uvicorn reload, repeated CLI runs in one process)
    if any(getattr(h, "_vocab_drill", False) for h in root_logger.handlers):
        return

    # File Handler
    file_handler = RotatingFileHandler(log_file or config.LOG_FILE, maxBytes=5*1024*1024, backupCount=2, encoding="utf-8")
    file_handler.setFormatter(log_formatter)
    file_handler.setLevel(log_level)
    file_handler._vocab_drill = True

    # Stream Handler
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(log_formatter)
    stream_handler.setLevel(log_level)
    stream_handler._vocab_drill = True

    root_logger.setLevel(log_level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(stream_handler)
