"""Logging and error reporting for the Batch Operations MCP server.

Three loggers are used:
- ``mcp_call_logger``: every tool call, its arguments and its result
- ``error_logger``: structured error records from ``log_structured_error``
- ``batch_logger``: batch lifecycle events and retry warnings

``setup_logging`` attaches a rotating file handler to all of them; until it is
called the loggers propagate to the root logger.
"""

import functools
import inspect
import json
import logging
import traceback
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from typing import Protocol

from .metrics_config import record_tool_call_error
from .metrics_config import record_tool_call_start
from .metrics_config import record_tool_call_success

mcp_call_logger = logging.getLogger("mcp_call_logger")
error_logger = logging.getLogger("error_logger")
batch_logger = logging.getLogger("batch_operations")

_STANDARD_RECORD_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_logging_configured = False


class ErrorCategory(Enum):
    """Severity classes used for structured error logging."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


_CATEGORY_LEVELS = {
    ErrorCategory.CRITICAL: logging.CRITICAL,
    ErrorCategory.ERROR: logging.ERROR,
    ErrorCategory.WARNING: logging.WARNING,
    ErrorCategory.INFO: logging.INFO,
}


class StructuredLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(log_entry, default=str)


def setup_logging(settings=None) -> None:
    """Attach rotating file handlers to the server loggers.

    Safe to call more than once; only the first call configures handlers.
    """
    global _logging_configured
    if _logging_configured:
        return

    if settings is None:
        from .config import get_settings

        settings = get_settings()

    log_file_path = Path(settings.log_file).expanduser().resolve()
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    # maxBytes: 10MB per file, backupCount: 5 files (total ~50MB)
    file_handler = RotatingFileHandler(log_file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
    if settings.structured_logging:
        file_handler.setFormatter(StructuredLogFormatter())
    else:
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    for logger in (mcp_call_logger, error_logger, batch_logger):
        logger.setLevel(level)
        logger.addHandler(file_handler)
        # stdout belongs to the stdio transport
        logger.propagate = False

    _logging_configured = True


def log_structured_error(
    category: ErrorCategory,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    **fields: Any,
) -> None:
    """Log an error record with category, context and optional exception."""
    extra: dict[str, Any] = {"error_category": category.value}
    if context:
        extra.update(context)
    extra.update(fields)
    if exception is not None:
        extra["exception_type"] = type(exception).__name__
        if hasattr(exception, "to_dict"):
            extra["error_details"] = exception.to_dict()

    error_logger.log(
        _CATEGORY_LEVELS[category],
        message,
        extra=extra,
        exc_info=exception is not None,
    )


def safe_operation(
    operation_name: str,
    operation_func,
    *args,
    error_category: ErrorCategory = ErrorCategory.ERROR,
    context: dict[str, Any] | None = None,
    **kwargs,
) -> tuple[bool, Any, Exception | None]:
    """Run a callable, returning ``(success, result, error)`` instead of raising."""
    try:
        return True, operation_func(*args, **kwargs), None
    except Exception as e:
        log_structured_error(
            category=error_category,
            message=f"Operation {operation_name} failed: {e}",
            exception=e,
            context=context,
            operation=operation_name,
        )
        return False, None, e


# --- Batch event sink ---


class EventRecorder(Protocol):
    """Destination for batch lifecycle events."""

    def record(self, event: str, **fields: Any) -> None: ...


class LoggingEventRecorder:
    """EventRecorder that writes events to the batch operations logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or batch_logger

    def record(self, event: str, **fields: Any) -> None:
        if event == "batch_started":
            message = f"Starting batch operations: {fields.get('operation_count', 0)} operations"
        elif event == "batch_completed":
            message = "Batch operations completed"
        else:
            message = event
        self.logger.info(message, extra={"event": event, **fields})


# --- Decorator for Logging MCP Calls with Metrics ---


def _render(value: Any) -> str:
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json(indent=None, exclude_none=True)
    return repr(value)


def _log_call_start(func_name: str, args: tuple, kwargs: dict) -> None:
    try:
        logged_args = [_render(arg) for arg in args]
        logged_kwargs = {k: _render(v) for k, v in kwargs.items()}
        arg_str = f"args={logged_args}, kwargs={logged_kwargs}"
    except Exception as e:
        arg_str = f"args/kwargs logging error: {e}"
    mcp_call_logger.info(f"Calling tool: {func_name} with {arg_str}")


def _log_call_success(func_name: str, start_time: float | None, result: Any) -> None:
    try:
        result_str = _render(result)
    except Exception as e:
        result_str = f"Result logging error: {e}"
    record_tool_call_success(func_name, start_time, len(result_str))
    mcp_call_logger.info(f"Tool {func_name} returned: {result_str}")


def _log_call_error(func_name: str, start_time: float | None, error: Exception) -> None:
    record_tool_call_error(func_name, start_time, error)
    mcp_call_logger.error(f"Tool {func_name} raised exception: {error}", exc_info=True)
    log_structured_error(
        category=ErrorCategory.ERROR,
        message=f"Tool {func_name} failed",
        exception=error,
        operation="tool_execution",
        function=func_name,
    )


def log_mcp_call(func):
    """Log each call of an MCP tool, its result or its exception.

    Works for both plain and coroutine functions.
    """
    func_name = getattr(func, "__name__", "unknown_function")

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = record_tool_call_start(func_name, args, kwargs)
            _log_call_start(func_name, args, kwargs)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_call_error(func_name, start_time, e)
                raise
            _log_call_success(func_name, start_time, result)
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = record_tool_call_start(func_name, args, kwargs)
        _log_call_start(func_name, args, kwargs)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_call_error(func_name, start_time, e)
            raise
        _log_call_success(func_name, start_time, result)
        return result

    return wrapper
