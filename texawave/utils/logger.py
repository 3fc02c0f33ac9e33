"""
Logging setup.
Text logs for development, JSON lines for production (LOG_FORMAT=json).
Request, database and service-call helpers attach their context as
record extras so the JSON formatter can emit them as fields.
"""
import asyncio
import functools
import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from texawave.config import Settings, settings as default_settings

# Extra attributes copied into JSON records when present
EXTRA_FIELDS = (
    "user_id", "request_id", "duration_ms", "method", "path",
    "status_code", "collection", "doc_id", "order_id", "employee_id"
)

QUIET_LOGGERS = ("uvicorn.access", "motor", "pymongo", "apscheduler", "asyncio")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human-readable format."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the root logger from LOG_LEVEL, LOG_FORMAT and LOG_FILE.
    Called once from the application lifespan.
    """
    settings = settings or default_settings
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if settings.LOG_FORMAT.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_file_path = Path(settings.LOG_FILE)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(f"✅ Logging configured: level={settings.LOG_LEVEL}, format={settings.LOG_FORMAT}")


class LoggerAdapter(logging.LoggerAdapter):
    """
    Binds fixed context (an order id, an employee id) to every record.
    Per-call extras are kept; bound values win on conflict.

        log = LoggerAdapter(logger, {"order_id": order_id})
        log.info("QC saved")
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


@contextmanager
def _timed(logger: logging.Logger, func_name: str):
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - started) * 1000
        logger.error(f"❌ {func_name} failed after {elapsed:.2f}ms: {e}", exc_info=True)
        raise
    elapsed = (time.perf_counter() - started) * 1000
    logger.info(f"✅ {func_name} completed in {elapsed:.2f}ms", extra={"duration_ms": round(elapsed, 2)})


def log_function_call(logger: logging.Logger):
    """
    Decorator logging how long a service call took, and its failure if any.
    Works on both coroutines and plain functions.

    Example:
        @log_function_call(logger)
        async def process_due_profiles(...):
            ...
    """
    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with _timed(logger, func.__name__):
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with _timed(logger, func.__name__):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator


def log_api_request(logger: logging.Logger, method: str, path: str, user_id: str = None):
    """Log API request."""
    extra = {"method": method, "path": path}
    if user_id:
        extra["user_id"] = user_id
    logger.debug(f"API Request: {method} {path}", extra=extra)


def log_api_response(logger: logging.Logger, method: str, path: str, status_code: int, duration_ms: float):
    """Log API response."""
    logger.info(
        f"API Response: {method} {path} - {status_code}",
        extra={"method": method, "path": path, "status_code": status_code, "duration_ms": round(duration_ms, 2)}
    )


def log_database_operation(logger: logging.Logger, operation: str, collection: str, doc_id: str = None):
    """Log database operation."""
    msg = f"DB {operation}: {collection}"
    if doc_id:
        msg += f" (id={doc_id})"
    logger.debug(msg, extra={"collection": collection, "doc_id": doc_id})
