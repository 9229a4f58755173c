"""
Process Video Response DTOs

DTOs for the HTTP front end's responses.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ProcessVideoResponse(BaseModel):
    """
    Response DTO for a finished loop job.

    Field names follow the upload form's client script.
    """

    success: bool = Field(description="Whether the job produced an output file")
    message: str = Field(description="Human-readable summary")
    downloadUrl: Optional[str] = Field(None, description="URL of the processed file")
    outputFileName: Optional[str] = Field(None, description="Name of the processed file")
    loops: Optional[int] = Field(None, description="Number of loops rendered")
    expectedDuration: Optional[float] = Field(None, description="Expected looped duration in seconds")


class HealthResponse(BaseModel):
    """Health check payload"""

    status: str
    service: str
    version: str
    ffmpeg_available: bool
