"""
Concat Manifest Writer

Writes the list file read by ffmpeg's concat demuxer.
"""
from pathlib import Path
import logging

from video_looper.exceptions import ManifestWriteError

logger = logging.getLogger(__name__)


def format_concat_entry(path: Path) -> str:
    """
    Format one `file` directive for the concat demuxer.

    Backslashes become forward slashes and single quotes are closed,
    escaped and reopened so that any path parses as one token.
    """
    posix = str(path).replace('\\', '/')
    quoted = posix.replace("'", "'\\''")
    return f"file '{quoted}'\n"


def write_manifest(video_path, loops: int, manifest_path: Path) -> Path:
    """
    Write a concat manifest listing the video `loops` times.

    Args:
        video_path: Source video; resolved to an absolute path once
        loops: Number of entries (already validated as positive)
        manifest_path: Where to write the manifest (created or overwritten)

    Returns:
        The manifest path

    Raises:
        ManifestWriteError: If the manifest cannot be created or written
    """
    manifest_path = Path(manifest_path)

    logger.info(f"Creating concatenation file: {manifest_path}")
    try:
        entry = format_concat_entry(Path(video_path).resolve())
        # surrogateescape writes undecodable file names back as their raw bytes
        with open(manifest_path, 'w', encoding='utf-8', errors='surrogateescape', newline='\n') as f:
            for _ in range(loops):
                f.write(entry)
    except (OSError, UnicodeError) as e:
        raise ManifestWriteError(
            str(manifest_path),
            f"Could not write concat manifest '{manifest_path}': {e}"
        ) from e

    logger.debug(f"Concatenation file written with {loops} entries")
    return manifest_path
