# core/logging_config.py
import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "reservations"

# supabase-py logs every PostgREST call through these at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Uvicorn reload imports this module twice
    if logger.handlers:
        return logger

    logger.setLevel(settings.LOG_LEVEL.upper())

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
