import json
import logging
from logging.config import dictConfig

from oss_storage.common.config import get_settings


def setup_logging(level: str | None = None) -> None:
    """Configure JSON root logging and the plain ``storage`` logger.

    ``level`` defaults to ``LOG_LEVEL`` from the settings.
    """
    level = level or get_settings().LOG_LEVEL
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonFormatter,
                },
                "plain": {
                    "format": "%(levelname)s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
                "storage_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
            "loggers": {
                "storage": {
                    "handlers": ["storage_console"],
                    "level": level,
                    "propagate": False,
                },
                "botocore": {
                    "level": "WARNING",
                },
            },
        }
    )


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)
