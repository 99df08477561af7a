"""JSON logging configuration for devenv_ops tools."""

import logging
import os

from pythonjsonlogger import jsonlogger

LOG_LEVEL_ENV = "DEVENV_OPS_LOG_LEVEL"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter limited to timestamp, level, message, exc_info, funcName, lineno."""

    def add_fields(self, log_record, record, message_dict):
        """Override to drop everything outside the allowed field set.

        Args:
            log_record: Dict to be logged as JSON
            record: LogRecord object from logging framework
            message_dict: Dict containing message and args
        """
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        allowed_fields = {
            "timestamp",
            "level",
            "message",
            "exc_info",
            "funcName",
            "lineno",
        }

        keys_to_remove = [key for key in log_record if key not in allowed_fields]
        for key in keys_to_remove:
            log_record.pop(key)


def _resolve_level() -> int:
    """Return the level named by DEVENV_OPS_LOG_LEVEL, INFO when unset or unknown."""
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _setup_logger() -> logging.Logger:
    """Initialize and configure singleton logger.

    Returns:
        Configured logger with CustomJsonFormatter
    """
    logger = logging.getLogger("devenv_ops")

    # Prevent duplicate handlers if module reloaded
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = CustomJsonFormatter(
        fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
        timestamp=True,
    )
    handler.setFormatter(formatter)

    logger.setLevel(_resolve_level())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


# Singleton logger instance - import this in other modules
LOGGER = _setup_logger()
