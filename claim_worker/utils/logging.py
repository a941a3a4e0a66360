"""Logging utilities with context."""
import logging
import json
import os
import sys
import traceback
import socket
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union, cast
from logging.handlers import RotatingFileHandler

# Environment-specific configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
LOG_FILE = os.environ.get("LOG_FILE", None)  # File path or None for stdout
LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", 10485760))  # 10MB default
LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", 5))
HOSTNAME = socket.gethostname()
SERVICE_NAME = os.environ.get("SERVICE_NAME", "claim_worker")
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

# Sensitive fields that should be redacted in logs
SENSITIVE_FIELDS = {
    "password", "token", "secret", "credential", "pwd", "auth", "database_url"
}

# LogRecord attributes that are never copied into the JSON body
_RESERVED_ATTRS = {
    "args", "exc_info", "exc_text", "stack_info", "msg", "created", "msecs",
    "relativeCreated", "levelno", "pathname", "filename", "processName",
    "threadName", "taskName", "levelname", "name", "module", "funcName", "lineno",
}


class JsonFormatter(logging.Formatter):
    """Formatter for JSON-structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.now(timezone.utc).isoformat()

        exc_info = None
        if record.exc_info:
            try:
                exc_info = {
                    "exception_type": record.exc_info[0].__name__,
                    "exception_message": str(record.exc_info[1]),
                    "traceback": traceback.format_exception(*record.exc_info)
                }
            except (AttributeError, TypeError) as e:
                exc_info = {
                    "exception_type": "unknown",
                    "exception_message": "Error formatting exception info",
                    "format_error": str(e)
                }

        log_data = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": self._safe_str(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "service": SERVICE_NAME,
            "hostname": HOSTNAME,
            "pid": record.process,
            "environment": ENVIRONMENT,
        }

        if exc_info:
            log_data["exception"] = exc_info

        # Extra fields from ContextAdapter / logger.x(..., extra={...})
        for key, value in getattr(record, "__dict__", {}).items():
            if key in log_data or key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps({key: value})
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = self._safe_str(value)

        self._redact_sensitive_data(log_data)

        try:
            return json.dumps(log_data)
        except (TypeError, ValueError):
            sanitized = {"message": "Error serializing log data", "original_message": self._safe_str(log_data)}
            return json.dumps(sanitized)

    def _safe_str(self, obj: Any) -> str:
        """Safely convert any object to string."""
        try:
            return str(obj)
        except Exception:
            return "<<Error converting to string>>"

    def _redact_sensitive_data(self, data: Any) -> None:
        """Recursively redact sensitive data."""
        if isinstance(data, dict):
            for key, value in list(data.items()):
                is_sensitive = any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS)
                if is_sensitive and isinstance(value, (str, int, float)):
                    data[key] = "********"
                else:
                    self._redact_sensitive_data(value)
        elif isinstance(data, list):
            for item in data:
                self._redact_sensitive_data(item)


class TextFormatter(logging.Formatter):
    """Formatter for human-readable text logs."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s (pid=%(process)d) - %(message)s"
        )


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that adds context to all log messages."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Process log message, adding context."""
        if 'extra' not in kwargs:
            kwargs['extra'] = {}

        for key, value in self.extra.items():
            if key not in kwargs['extra']:
                kwargs['extra'][key] = value

        return msg, kwargs


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure global logging settings."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if (log_format or LOG_FORMAT).lower() == "json":
        formatter = JsonFormatter()
    else:
        formatter = TextFormatter()

    if LOG_FILE:
        try:
            handler = RotatingFileHandler(
                filename=LOG_FILE,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT
            )
        except (IOError, PermissionError) as e:
            # Fall back to stdout if file creation fails
            sys.stderr.write(f"Error creating log file {LOG_FILE}: {e}. Using stdout instead.\n")
            handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_context_logger(
    name: str,
    trace_id: Optional[str] = None,
    worker_id: Optional[str] = None,
    target_id: Optional[str] = None,
    request_id: Optional[int] = None,
    **additional_context
) -> logging.LoggerAdapter:
    """
    Get a logger with consistent context.

    Args:
        name: Logger name
        trace_id: Trace ID of the current claim attempt or API call
        worker_id: Worker process identifier
        target_id: Target entity of the request being handled
        request_id: Ledger request id
        additional_context: Additional context key-value pairs

    Returns:
        Logger adapter with context
    """
    context = additional_context.copy()

    if trace_id:
        context["trace_id"] = trace_id
    if worker_id:
        context["worker_id"] = str(worker_id)
    if target_id:
        context["target_id"] = str(target_id)
    if request_id is not None:
        context["request_id"] = request_id

    logger = logging.getLogger(name)
    return ContextAdapter(logger, context)


def with_context(
    logger_obj: Union[logging.Logger, logging.LoggerAdapter],
    **context
) -> logging.LoggerAdapter:
    """
    Create a new logger with additional context.

    Args:
        logger_obj: Existing logger or logger adapter
        **context: Additional context key-value pairs

    Returns:
        Logger adapter with merged context
    """
    if isinstance(logger_obj, ContextAdapter):
        new_context = dict(logger_obj.extra)
        new_context.update(context)
        return ContextAdapter(logger_obj.logger, new_context)
    if isinstance(logger_obj, logging.Logger):
        return ContextAdapter(logger_obj, context)
    return cast(logging.LoggerAdapter, logger_obj)
