"""
Input validation service - checks a loop job before anything is written
"""
from pathlib import Path
import logging

from video_looper.constants import LoopDefaults
from video_looper.dtos.internal import LoopJob
from video_looper.exceptions import InvalidConfigurationError, MissingInputError

logger = logging.getLogger(__name__)


class InputValidator:
    """Validates source files and job parameters without side effects"""

    @staticmethod
    def validate_source_file(path, role: str) -> Path:
        """
        Validate that a source file exists and is a regular file

        Args:
            path: Path to the source file
            role: "video" or "audio", used in error messages

        Returns:
            Resolved absolute path

        Raises:
            MissingInputError: If the path is missing or not a regular file
        """
        resolved = Path(path).expanduser().resolve()

        if not resolved.exists():
            raise MissingInputError(role, str(resolved))

        if not resolved.is_file():
            raise MissingInputError(
                role,
                str(resolved),
                f"Input {role} path is not a regular file: '{resolved}'"
            )

        return resolved

    @staticmethod
    def validate_loop_count(loops, max_loops: int = LoopDefaults.MAX_LOOPS) -> int:
        """
        Validate the loop count

        Args:
            loops: Requested number of repetitions
            max_loops: Upper bound accepted by this installation

        Returns:
            The loop count

        Raises:
            InvalidConfigurationError: If loops is not an integer in 1..max_loops
        """
        # bool is a subclass of int
        if isinstance(loops, bool) or not isinstance(loops, int):
            raise InvalidConfigurationError(
                "loops",
                loops,
                f"Number of loops must be a positive integer, got {loops!r}"
            )

        if loops <= 0:
            raise InvalidConfigurationError(
                "loops",
                loops,
                "Number of loops must be a positive integer."
            )

        if loops > max_loops:
            raise InvalidConfigurationError(
                "loops",
                loops,
                f"Number of loops must be between 1 and {max_loops}, got {loops}"
            )

        return loops

    @staticmethod
    def validate_output_path(path) -> Path:
        """
        Validate that the output location is usable

        The parent directory may be missing; it is created later by the
        pipeline. An existing directory at the output path is rejected. An empty
        path resolves to the working directory and is rejected the same way.

        Raises:
            InvalidConfigurationError: If the path names a directory
        """
        resolved = Path(path).expanduser().resolve()
        if resolved.is_dir():
            raise InvalidConfigurationError(
                "output_path",
                str(resolved),
                f"Output path is a directory: '{resolved}'"
            )

        return resolved

    @classmethod
    def validate_job(cls, job: LoopJob, max_loops: int = LoopDefaults.MAX_LOOPS) -> None:
        """
        Validate a complete job; the first failing check raises

        Raises:
            MissingInputError: If the video or audio source is missing
            InvalidConfigurationError: If loop count or output path is invalid
        """
        cls.validate_source_file(job.video_path, "video")
        cls.validate_source_file(job.audio_path, "audio")
        cls.validate_loop_count(job.loops, max_loops)
        cls.validate_output_path(job.output_path)

        logger.debug(f"Job inputs validated: video={job.video_path}, audio={job.audio_path}, loops={job.loops}")


# Global singleton instance
input_validator = InputValidator()
