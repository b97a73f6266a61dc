import logging
import os
from logging.config import dictConfig


LOGGER_NAME = "streaming_catalog"
LOG_FORMAT = "%(levelprefix)s | %(asctime)s | %(message)s"


def _default_log_level() -> str:
    if os.environ.get("DEBUG"):
        return "DEBUG"
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def create_log_config(log_level: str):
    """Logging configuration shared by the API process and the scripts."""
    return {
        "logger_name": LOGGER_NAME,
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["default"], "level": log_level},
            # transport errors are reported by the catalog client
            "aiohttp.client": {"handlers": ["default"], "level": "WARNING"},
        },
    }


dictConfig(create_log_config(log_level=_default_log_level()))
logger = logging.getLogger(LOGGER_NAME)
