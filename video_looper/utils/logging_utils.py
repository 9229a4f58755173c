"""
Logging Utilities

Configures console/file logging for the command-line and server entry points
and provides structured context for log messages.
"""

import logging
import sys
from contextvars import ContextVar
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(job_id)s] %(message)s'
LOG_FILE_NAME = "video_looper.log"

# Context variable for job-scoped logging context
_logging_context: ContextVar[Dict[str, Any]] = ContextVar('logging_context', default={})


class JobContextFilter(logging.Filter):
    """Stamp every record with the current job id ('-' outside a job) for LOG_FORMAT"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'job_id'):
            record.job_id = _logging_context.get().get('job_id', '-')
        return True


def configure_logging(level: int = logging.INFO, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional rotating file.

    Calling this more than once replaces the handlers installed previously.

    Args:
        level: Minimum level for all handlers
        log_dir: Directory for video_looper.log (10MB per file, keep 5 backups)

    Returns:
        The root logger
    """
    log_formatter = logging.Formatter(LOG_FORMAT)
    context_filter = JobContextFilter()

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, '_video_looper', False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(level)
    console_handler.addFilter(context_filter)
    console_handler._video_looper = True
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8',
            errors='backslashreplace'
        )
        file_handler.setFormatter(log_formatter)
        file_handler.setLevel(level)
        file_handler.addFilter(context_filter)
        file_handler._video_looper = True
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
    return root_logger


class StructuredLogger:
    """
    Wrapper around standard logger that adds structured context.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Loop step finished", extra={"job_id": job_id, "loops": 3})
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        context = _logging_context.get().copy()
        if extra:
            context.update(extra)
        return context

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(message, extra=self._add_context(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(message, extra=self._add_context(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(message, extra=self._add_context(extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        self.logger.error(message, extra=self._add_context(extra), exc_info=exc_info)


def set_logging_context(**kwargs):
    """
    Set logging context for the current job.

    Example:
        set_logging_context(job_id="3f2a...", loops=225)
    """
    context = _logging_context.get().copy()
    context.update(kwargs)
    _logging_context.set(context)


def clear_logging_context():
    """Clear the logging context."""
    _logging_context.set({})


def log_operation(operation_name: str):
    """
    Decorator to log operation start/end with structured context.

    Args:
        operation_name: Name of the operation

    Example:
        @log_operation("loop_job")
        def run(self, job): ...
    """
    def decorator(func):
        def _context(kwargs) -> Dict[str, Any]:
            context = {"operation": operation_name}
            for key in ["job_id", "loops"]:
                if key in kwargs:
                    context[key] = kwargs[key]
            return context

        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)
            context = _context(kwargs)
            logger.debug(f"Starting {operation_name}", extra=context)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                context["error"] = str(e)
                context["error_type"] = type(e).__name__
                logger.error(f"Failed {operation_name}", extra=context, exc_info=True)
                raise
            logger.debug(f"Completed {operation_name}", extra=context)
            return result

        return wrapper

    return decorator
