"""
Custom exception classes for the application.

This module defines domain-specific exceptions that provide better error handling
and clearer error messages throughout the loop pipeline.
"""

from typing import Optional


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when there's a configuration issue"""

    def __init__(self, message: str, missing_keys: list[str] | None = None):
        details = {"missing_keys": missing_keys} if missing_keys else {}
        super().__init__(message, details)


class ValidationError(ApplicationError):
    """Raised when validation fails"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class MissingInputError(ValidationError):
    """Raised when a source file does not exist or is not a regular file"""

    def __init__(self, role: str, path: str, message: str | None = None):
        self.role = role
        self.path = path
        msg = message or f"Input {role} file not found at '{path}'"
        super().__init__(msg, invalid_fields={f"{role}_path": path})


class InvalidConfigurationError(ValidationError):
    """Raised when a job parameter such as the loop count is out of range"""

    def __init__(self, field: str, value, message: str):
        self.field = field
        self.value = value
        super().__init__(message, invalid_fields={field: value})


class ManifestWriteError(ApplicationError):
    """Raised when the concat manifest or scratch space cannot be created"""

    def __init__(self, path: str, message: str):
        super().__init__(message, {"path": path})


class FFmpegError(ApplicationError):
    """Raised when an ffmpeg invocation exits with a non-zero code"""

    def __init__(
        self,
        stage: str,
        returncode: Optional[int],
        stderr_tail: str = "",
        message: str | None = None,
    ):
        self.stage = stage
        self.returncode = returncode
        self.stderr_tail = stderr_tail
        msg = message or f"ffmpeg failed during {stage.lower()} stage (exit code {returncode})"
        details = {"stage": stage, "returncode": returncode}
        if stderr_tail:
            details["stderr"] = stderr_tail
        super().__init__(msg, details)


class FFmpegNotFoundError(FFmpegError):
    """Raised when the ffmpeg/ffprobe binary cannot be started"""

    def __init__(self, binary: str, stage: str = "SETUP"):
        self.binary = binary
        super().__init__(
            stage,
            None,
            message=(
                f"Failed to start '{binary}'. "
                f"Ensure FFmpeg is installed and available on your PATH."
            ),
        )
