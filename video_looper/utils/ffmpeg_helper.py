"""
FFmpeg Binary Helper

Resolves the ffmpeg/ffprobe executables used by the pipeline.
Handles explicit overrides, PyInstaller bundled binaries and the search path.
"""
import os
import sys
import shutil
import logging
from pathlib import Path
from typing import Optional

from video_looper.exceptions import FFmpegNotFoundError

logger = logging.getLogger(__name__)


def get_bundled_binary_path(binary_name: str) -> Optional[str]:
    """
    Get path to a bundled ffmpeg binary, if one ships with the application.

    Args:
        binary_name: 'ffmpeg' or 'ffprobe'

    Returns:
        Absolute path to the binary, or None when nothing is bundled
    """
    if getattr(sys, 'frozen', False):
        # Running as PyInstaller bundle
        base_path = Path(sys._MEIPASS)
    else:
        base_path = Path(__file__).parent.parent.parent
    binary_path = base_path / 'ffmpeg_bins' / binary_name

    if binary_path.is_file():
        logger.debug(f"Found bundled {binary_name}: {binary_path}")
        return str(binary_path)
    return None


def resolve_binary(binary_name: str, override: Optional[str] = None) -> str:
    """
    Resolve an ffmpeg-family executable.

    Lookup order: explicit override, bundled ffmpeg_bins/, then PATH.

    Args:
        binary_name: 'ffmpeg' or 'ffprobe'
        override: Path or command name supplied by configuration

    Returns:
        Path to the executable

    Raises:
        FFmpegNotFoundError: If the binary cannot be found
    """
    if override:
        candidate = shutil.which(override) or (override if os.path.isfile(override) else None)
        if not candidate:
            raise FFmpegNotFoundError(override)
        return candidate

    bundled = get_bundled_binary_path(binary_name)
    if bundled:
        return bundled

    on_path = shutil.which(binary_name)
    if not on_path:
        raise FFmpegNotFoundError(binary_name)

    logger.debug(f"Using {binary_name} from PATH: {on_path}")
    return on_path


def get_ffmpeg_path(override: Optional[str] = None) -> str:
    """Get path to the ffmpeg binary."""
    return resolve_binary('ffmpeg', override)


def get_ffprobe_path(override: Optional[str] = None) -> str:
    """Get path to the ffprobe binary."""
    return resolve_binary('ffprobe', override)
