"""
Utility functions and decorators.
"""

from .logging_utils import configure_logging, log_operation

__all__ = ["configure_logging", "log_operation"]
