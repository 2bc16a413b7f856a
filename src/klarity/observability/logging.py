"""Structured logging configuration for Klarity."""

import logging
import logging.config
from typing import Any

CORRELATION_FIELDS = ("telegram_id", "session_id")


class TurnContextFilter(logging.Filter):
    """Give every record the turn correlation fields.

    Node loggers set them through ``ContextLogger.with_context``; records
    from elsewhere carry ``None`` so the JSON output keeps a fixed shape.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CORRELATION_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        return True


def setup_logging(level: str = "INFO", json_file: str | None = None) -> None:
    """
    Configure structured logging for Klarity.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_file: Optional path of a rotating JSON log file
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": (
                    "%(asctime)s %(name)s %(levelname)s %(telegram_id)s %(session_id)s %(message)s"
                ),
            },
        },
        "filters": {
            "turn_context": {"()": TurnContextFilter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "level": level,
            },
        },
        "loggers": {
            "klarity": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }

    if json_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": json_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "level": level,
            "filters": ["turn_context"],
        }
        config["loggers"]["klarity"]["handlers"].append("file")

    logging.config.dictConfig(config)


class ContextLogger:
    """Logger with contextual information."""

    def __init__(self, name: str):
        """
        Initialize context logger.

        Args:
            name: Logger name (typically __name__)
        """
        self.logger = logging.getLogger(name)

    def with_context(self, **context: Any) -> logging.LoggerAdapter:
        """
        Add context to log messages.

        Context is attached to each record as ``extra`` so JSON output
        carries it as separate fields.

        Args:
            **context: Context key-value pairs

        Returns:
            LoggerAdapter with context
        """
        return logging.LoggerAdapter(self.logger, context)
