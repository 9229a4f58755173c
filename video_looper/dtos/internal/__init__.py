"""
Internal DTOs

DTOs for service-to-service communication.
"""

from .loop_job_dto import LoopJob, LoopResult

__all__ = ["LoopJob", "LoopResult"]
