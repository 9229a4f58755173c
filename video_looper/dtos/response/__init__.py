"""
Response DTOs

DTOs for outgoing API responses.
"""

from .process_video_response import ProcessVideoResponse, HealthResponse

__all__ = ["ProcessVideoResponse", "HealthResponse"]
