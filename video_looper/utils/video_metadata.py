"""
Media metadata extraction utilities

Provides a lightweight ffprobe wrapper used to log the source and expected
output durations of a loop job.
"""

import subprocess
import json
import logging
from pathlib import Path
from typing import Optional

from video_looper.exceptions import FFmpegNotFoundError
from video_looper.utils.ffmpeg_helper import get_ffprobe_path

logger = logging.getLogger(__name__)


def get_media_duration(file_path, ffprobe_binary: Optional[str] = None) -> Optional[float]:
    """
    Extract container duration using ffprobe.

    This only reads file metadata, not the actual media streams.

    Args:
        file_path: Path to a video or audio file
        ffprobe_binary: Optional ffprobe override

    Returns:
        Duration in seconds, or None if extraction fails
    """
    try:
        result = subprocess.run(
            [
                get_ffprobe_path(ffprobe_binary),
                '-v', 'quiet',
                '-print_format', 'json',
                '-show_format',
                str(file_path)
            ],
            capture_output=True,
            text=True,
            timeout=10
        )

        if result.returncode != 0:
            logger.warning(f"ffprobe failed for {file_path}: {result.stderr}")
            return None

        data = json.loads(result.stdout)
        duration_str = data.get('format', {}).get('duration')

        if not duration_str:
            logger.warning(f"No duration found in metadata for {file_path}")
            return None

        duration = float(duration_str)
        if duration <= 0:
            logger.warning(f"Non-positive duration {duration} reported for {file_path}")
            return None

        logger.debug(f"Extracted duration for {Path(file_path).name}: {duration:.2f}s")
        return duration

    except FFmpegNotFoundError as e:
        logger.warning(f"Skipping duration probe: {e.message}")
        return None
    except subprocess.TimeoutExpired:
        logger.error(f"ffprobe timeout for {file_path}")
        return None
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Failed to parse ffprobe output for {file_path}: {e}")
        return None
    except OSError as e:
        logger.error(f"Error extracting duration from {file_path}: {e}")
        return None
