"""
Error handling decorator for API endpoints.

Converts application exceptions raised inside an endpoint into HTTPException
responses with consistent status codes and messages.
"""

from functools import wraps
from typing import Callable
import logging

from fastapi import HTTPException

from video_looper.constants import HTTPStatus, UploadLimits
from video_looper.exceptions import (
    ApplicationError,
    ConfigurationError,
    FFmpegError,
    FFmpegNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def summarize_stderr(stderr_tail: str, limit: int = UploadLimits.ERROR_DETAIL_CHARS) -> str:
    """Flatten ffmpeg stderr to a single line and shorten it for client messages."""
    flat = " ".join(stderr_tail.split())
    if len(flat) > limit:
        return flat[:limit] + "..."
    return flat


def to_http_exception(operation_name: str, error: Exception) -> HTTPException:
    """Map an exception to the HTTPException returned to the client."""
    if isinstance(error, (ValidationError, ConfigurationError)):
        logger.warning(f"{operation_name} - Validation error: {error.message}")
        return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=error.message)

    if isinstance(error, FFmpegNotFoundError):
        logger.error(f"{operation_name} - ffmpeg unavailable: {error.message}")
        return HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail=error.message)

    if isinstance(error, FFmpegError):
        logger.error(f"{operation_name} - ffmpeg error: {error.message}")
        detail = f"Video processing failed: {error.message}"
        if error.stderr_tail:
            detail += f" (Details: {summarize_stderr(error.stderr_tail)})"
        return HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=detail)

    if isinstance(error, ApplicationError):
        logger.error(f"{operation_name} - Application error: {error.message}", exc_info=True)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"{operation_name} failed: {error.message}"
        )

    logger.error(f"{operation_name} - Unexpected error: {error}", exc_info=True)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        detail=f"{operation_name} failed. Please check server logs."
    )


def handle_api_errors(operation_name: str):
    """
    Decorator to handle application errors consistently across async endpoints.

    Args:
        operation_name: Human-readable name of the operation (e.g., "Video processing")

    Example:
        @router.post("/process-video")
        @handle_api_errors("Video processing")
        async def process_video(...):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                raise to_http_exception(operation_name, e) from e

        return wrapper

    return decorator
