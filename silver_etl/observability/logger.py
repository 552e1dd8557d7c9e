"""
Structured JSON logging for the silver pipeline

Module loggers (get_logger(__name__)) propagate to the "silver_etl" package
logger, which is configured once from LOG_LEVEL and LOG_FORMAT and emits
JSON lines via python-json-logger. Counts, stage names and reason codes
passed through ``extra`` become top-level JSON fields.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "silver_etl"

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(function)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s - %(message)s"


class PipelineJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with an ISO timestamp, upper-case level and call site
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName


def setup_logger(level: str | None = None, format_type: str | None = None) -> logging.Logger:
    """
    (Re)configure the package logger

    Args:
        level: Log level name (defaults to env var LOG_LEVEL or INFO)
        format_type: "json" or "text" (defaults to env var LOG_FORMAT or json)

    Returns:
        The configured package logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if (format_type or os.getenv("LOG_FORMAT", "json")) == "json":
        formatter: logging.Formatter = PipelineJsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Return a logger below the package logger, configuring the package logger on first use."""
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logger()
    return logging.getLogger(name)


@contextmanager
def log_operation(operation_name: str, logger: logging.Logger | None = None, **extra_fields):
    """
    Log the start, outcome and duration of a pipeline step

    Exceptions are logged with their type and re-raised.

    Usage:
        with log_operation("deduplicate customers", logger=logger, rows=120):
            ...
    """
    logger = logger or get_logger()
    fields = {"operation": operation_name, **extra_fields}
    start = time.perf_counter()
    logger.info(f"Starting: {operation_name}", extra=fields)
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation_name}",
            extra={
                **fields,
                "status": "error",
                "duration_seconds": round(time.perf_counter() - start, 3),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise
    logger.info(
        f"Completed: {operation_name}",
        extra={**fields, "status": "success", "duration_seconds": round(time.perf_counter() - start, 3)},
    )
