"""Structured JSON logging configuration."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from cineverse.core.config import settings

# Extra keys whose values must never reach the logs
REDACTED_KEYS = frozenset(
    {"password", "password_hash", "token", "access_token", "captcha_token", "secret", "authorization"}
)
REDACTED = "[REDACTED]"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with the fields every log line carries."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        """Add service fields and mask credentials passed through ``extra``."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["service"] = settings.PROJECT_NAME
        log_record["env"] = settings.ENV

        for key in REDACTED_KEYS.intersection(log_record):
            log_record[key] = REDACTED

        # asctime duplicates timestamp
        log_record.pop("asctime", None)


def setup_logging() -> None:
    """Configure application logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Replace handlers installed by uvicorn or an earlier call
    root_logger.handlers.clear()

    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # Console handler (always JSON for consistency)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Request logging comes from RequestIDMiddleware; outbound reCAPTCHA calls log via the verifier
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if settings.ENV == "test":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
