import logging
import os
from logging.handlers import RotatingFileHandler

import config


def get_logger(name, log_dir=None, level=None):
    """
    Console + <log_dir>/<name>.log (rotating, 5MB x 5) logger.
    Level comes from `level` or LOG_LEVEL, defaulting to INFO.
    """
    logger = logging.getLogger(name)
    if logger.handlers:  # already configured
        return logger

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    logger.setLevel(level)
    logger.propagate = False

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s",
                            datefmt="%Y-%m-%dT%H:%M:%S%z")
    handlers = [logging.StreamHandler()]

    log_dir = log_dir or os.getenv("LOG_DIR", config.LOG_DIR)
    file_error = None
    try:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(os.path.join(log_dir, f"{name}.log"),
                                            maxBytes=5_000_000, backupCount=5, encoding="utf-8"))
    except OSError as e:
        file_error = e

    for handler in handlers:
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    if file_error is not None:
        logger.warning(f"File logging disabled ({log_dir}): {file_error}")
    return logger
