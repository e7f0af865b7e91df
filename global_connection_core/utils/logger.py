"""
Logging for the Global Connection Core.

This module provides:
1. ContextAwareLogger for console logs (pipe-delimited extras, credentials redacted)
2. ProjectContextFilter, which stamps the current project on every record
3. AzureQueueHandler for optional structured log shipping to a storage queue
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from azure.storage.queue import QueueClient, QueueServiceClient

from ..config import get_config
from ..constants import REDACTED, SENSITIVE_KEYS
from .json_utils import dumps

LOGGER_NAME = "global_connection_core"

_function_logger = None

# Attributes owned by logging.LogRecord; extras may not overwrite them
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


def redact(data: Any) -> Any:
    """Return a copy of ``data`` with sensitive keys masked, recursing into containers."""
    if isinstance(data, dict):
        return {
            k: (REDACTED if k in SENSITIVE_KEYS else redact(v)) for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


class ContextAwareLogger:
    """
    Logger wrapper that formats extra attributes in message while preserving them.

    This ensures extras appear in console output even when Azure Functions
    overrides the formatters.
    """

    def __init__(self, logger):
        """Initialize with an existing logger."""
        self.logger = logger

    def _log_with_formatted_extra(self, level, msg, **kwargs):
        extra = redact(kwargs.pop("extra", None) or {})
        exc_info = kwargs.pop("exc_info", None)

        if extra:
            extra_str = " | ".join([f"{k}={v}" for k, v in extra.items()])
            full_msg = f"{msg} | {extra_str}"
        else:
            full_msg = msg

        safe_extra = {
            (f"ctx_{k}" if k in _RESERVED_RECORD_KEYS else k): v for k, v in extra.items()
        }

        log_method = getattr(self.logger, level)
        if exc_info is not None:
            log_method(full_msg, extra=safe_extra, exc_info=exc_info)
        else:
            log_method(full_msg, extra=safe_extra)

    def set_level(self, level):
        """Set the logging level of the underlying logger."""
        self.logger.setLevel(level)

    def info(self, msg, **kwargs):
        self._log_with_formatted_extra("info", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._log_with_formatted_extra("error", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._log_with_formatted_extra("warning", msg, **kwargs)

    def debug(self, msg, **kwargs):
        self._log_with_formatted_extra("debug", msg, **kwargs)

    def exception(self, msg, **kwargs):
        self._log_with_formatted_extra("exception", msg, **kwargs)


class ProjectContextFilter(logging.Filter):
    """
    Logging filter that adds the current project external id to log records.
    """

    def filter(self, record):
        # Lazy import to avoid circular dependency
        from ..context.project_context import ProjectContext

        project_external_id = ProjectContext.get_current_project_external_id()
        if project_external_id:
            record.project_external_id = project_external_id

        return True


class AzureQueueHandler(logging.Handler):
    """
    Logging handler that ships structured log entries to an Azure Storage Queue.
    """

    def __init__(
        self,
        queue_name: str = "logs-queue",
        connection_string: Optional[str] = None,
        batch_size: int = 10,
    ):
        """
        Initialize the Azure Queue handler.

        Args:
            queue_name: Name of the queue to send logs to
            connection_string: Azure Storage connection string
            batch_size: Number of logs to batch before sending
        """
        super().__init__()
        self.queue_name = queue_name
        self.connection_string = connection_string or os.getenv("AzureWebJobsStorage")
        self.batch_size = batch_size
        self.log_buffer: List[Dict[str, Any]] = []

        if not self.connection_string:
            sys.stderr.write("Azure Storage connection string not provided\n")
        else:
            self._ensure_queue_exists()

    def _ensure_queue_exists(self) -> bool:
        try:
            queue_service = QueueServiceClient.from_connection_string(self.connection_string)
            queues = queue_service.list_queues()
            if not any(queue.name == self.queue_name for queue in queues):
                queue_service.create_queue(self.queue_name)
            return True
        except Exception as e:
            # Log shipping must never break the caller
            sys.stderr.write(f"Failed to ensure queue exists: {str(e)}\n")
            return False

    def build_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Convert a LogRecord into the queue payload."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "project_external_id"):
            log_entry["project_external_id"] = record.project_external_id

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
            and key != "project_external_id"
            and not key.startswith("_")
            and not callable(value)
        }
        if context:
            log_entry["context"] = redact(context)

        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": [
                    line.rstrip() for line in traceback.format_exception(*record.exc_info)
                ],
            }
        return log_entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log_buffer.append(self.build_entry(record))
            if len(self.log_buffer) >= self.batch_size:
                self.flush()
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        """Send any buffered log records to the queue."""
        if not self.log_buffer or not self.connection_string:
            return

        try:
            queue_client = QueueClient.from_connection_string(
                conn_str=self.connection_string, queue_name=self.queue_name
            )
            for log_entry in self.log_buffer:
                queue_client.send_message(dumps(log_entry))
            self.log_buffer.clear()
        except Exception as e:
            sys.stderr.write(f"Error sending logs to Azure Queue: {str(e)}\n")

    def close(self) -> None:
        """Flush any remaining logs before closing."""
        self.flush()
        super().close()


def configure_logging(
    function_name: str,
    log_level: Optional[Union[int, str]] = None,
    enable_queue: Optional[bool] = None,
    queue_name: Optional[str] = None,
    queue_batch_size: int = 10,
    connection_string: Optional[str] = None,
) -> "ContextAwareLogger":
    """
    Configure logging with console and optional queue output.

    Args:
        function_name: Name of the function app or worker
        log_level: Logging level (default: from config)
        enable_queue: Ship logs to Azure Queue (default: config.features.enable_logs_queue)
        queue_name: Name of the queue to send logs to (default: config.queue.logs_queue_name)
        queue_batch_size: Number of logs to batch before sending
        connection_string: Azure Storage connection string (default: from config)

    Returns:
        The configured logger wrapped with ContextAwareLogger
    """
    global _function_logger

    app_config = get_config()

    if log_level is None:
        log_level = app_config.logging.level
    if enable_queue is None:
        enable_queue = app_config.features.enable_logs_queue
    if connection_string is None:
        connection_string = app_config.queue.connection_string

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"{LOGGER_NAME}.{function_name}")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    project_filter = ProjectContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(app_config.logging.format))
    console_handler.addFilter(project_filter)
    logger.addHandler(console_handler)

    if enable_queue:
        queue_name = queue_name or app_config.queue.logs_queue_name
        queue_handler = AzureQueueHandler(
            queue_name=queue_name, connection_string=connection_string, batch_size=queue_batch_size
        )
        queue_handler.setLevel(log_level)
        queue_handler.addFilter(project_filter)
        logger.addHandler(queue_handler)

    wrapped_logger = ContextAwareLogger(logger)
    wrapped_logger.info(
        "Function logger configured",
        extra={
            "function_name": function_name,
            "queue_logging": enable_queue,
            "queue_name": queue_name if enable_queue else None,
        },
    )
    _function_logger = wrapped_logger
    return wrapped_logger


def reset_logging() -> None:
    """Forget the configured function logger."""
    global _function_logger
    _function_logger = None


def get_logger(
    log_level: Optional[Union[int, str]] = None,
) -> "ContextAwareLogger":
    """
    Get the function logger, falling back to the package logger.

    Args:
        log_level: Optional log level to set

    Returns:
        ContextAwareLogger instance
    """
    if _function_logger is not None:
        return _function_logger

    logger = logging.getLogger(LOGGER_NAME)

    if log_level is None:
        log_level = get_config().logging.level

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(log_level)

    return ContextAwareLogger(logger)
