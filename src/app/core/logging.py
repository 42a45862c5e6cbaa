"""Setting up a file logger for the web layer.

Returns a lazily initialized logger that writes to `{logging_dir}/{filename}`
with a timestamp and level. Core modules log through their own module loggers,
which propagate to the same handler once attached to the root `src` logger.
"""
import os
from logging import FileHandler, Formatter, getLogger, INFO
from src.app.core.config import settings


def get_logs_writer_logger(logging_dir=settings.LOG_PATH, filename='logs.log'):
    logger = getLogger("src")

    if logger.handlers:
        return logger

    os.makedirs(logging_dir, exist_ok=True)
    log_path = os.path.join(logging_dir, filename)

    logger.setLevel(INFO)
    logger.propagate = False

    handler = FileHandler(log_path, mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)

    return logger
