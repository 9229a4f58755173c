"""
Loop Job DTOs

Describe one loop-and-mux job and its outcome.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class LoopJob:
    """
    Job configuration for a single run of the pipeline.

    Paths are kept as given; the pipeline resolves them to absolute paths
    when it builds ffmpeg arguments.
    """

    video_path: Path
    audio_path: Path
    loops: int
    output_path: Path
    full_hd: bool = False

    @classmethod
    def create(cls, video_path, audio_path, loops, output_path, full_hd: bool = False) -> "LoopJob":
        """Build a job from plain strings or paths."""
        return cls(
            video_path=Path(video_path),
            audio_path=Path(audio_path),
            loops=loops,
            output_path=Path(output_path),
            full_hd=full_hd,
        )


@dataclass
class LoopResult:
    """
    Outcome of a pipeline run.

    `stage` is the last stage reached: DONE on success, otherwise the
    stage that failed.
    """

    success: bool
    stage: str
    output_path: Optional[Path] = None
    loops: int = 0
    error_message: Optional[str] = None
    error: Optional[Exception] = None
    source_duration: Optional[float] = None
    expected_duration: Optional[float] = None
    processing_time_seconds: Optional[float] = None
    job_id: Optional[str] = None
