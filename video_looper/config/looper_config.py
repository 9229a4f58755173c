"""
Runtime Configuration for the Loop Pipeline

Reads job-independent settings from LOOPER_* environment variables.

Includes:
- ffmpeg/ffprobe binary overrides
- Audio codec and bitrate for the combine step
- Loop count ceiling
- Scratch, upload, output and log directories
"""
import os
import logging
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from video_looper.constants import FFmpegDefaults, LoopDefaults
from video_looper.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUE_VALUES = ('true', '1', 'yes')
_FALSE_VALUES = ('false', '0', 'no', '')


@dataclass(frozen=True)
class LooperSettings:
    """Immutable settings shared by every job run in this process."""

    ffmpeg_binary: Optional[str] = None
    ffprobe_binary: Optional[str] = None
    audio_codec: str = FFmpegDefaults.AUDIO_CODEC
    audio_bitrate: str = FFmpegDefaults.AUDIO_BITRATE
    max_loops: int = LoopDefaults.MAX_LOOPS
    scratch_dir: Path = Path(tempfile.gettempdir())
    keep_temp: bool = False
    log_dir: Optional[Path] = None
    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("processed")

    def with_overrides(self, **changes) -> "LooperSettings":
        """Return a copy with the given fields replaced (None values are ignored)."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)


def _parse_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean (true/false), got '{raw}'")


def _parse_positive_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'")
    if value < 1:
        raise ConfigurationError(f"{key} must be at least 1, got {value}")
    return value


def _parse_path(environ: Mapping[str, str], key: str, default: Optional[Path]) -> Optional[Path]:
    raw = environ.get(key)
    if raw is None or raw.strip() == '':
        return default
    return Path(raw).expanduser()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> LooperSettings:
    """
    Build settings from LOOPER_* environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        LooperSettings instance

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ
    defaults = LooperSettings()

    audio_codec = env.get('LOOPER_AUDIO_CODEC', defaults.audio_codec).strip()
    audio_bitrate = env.get('LOOPER_AUDIO_BITRATE', defaults.audio_bitrate).strip()
    if not audio_codec:
        raise ConfigurationError("LOOPER_AUDIO_CODEC cannot be empty")
    if not audio_bitrate:
        raise ConfigurationError("LOOPER_AUDIO_BITRATE cannot be empty")

    settings = LooperSettings(
        ffmpeg_binary=env.get('LOOPER_FFMPEG_BINARY') or None,
        ffprobe_binary=env.get('LOOPER_FFPROBE_BINARY') or None,
        audio_codec=audio_codec,
        audio_bitrate=audio_bitrate,
        max_loops=_parse_positive_int(env, 'LOOPER_MAX_LOOPS', defaults.max_loops),
        scratch_dir=_parse_path(env, 'LOOPER_SCRATCH_DIR', defaults.scratch_dir),
        keep_temp=_parse_bool(env, 'LOOPER_KEEP_TEMP', defaults.keep_temp),
        log_dir=_parse_path(env, 'LOOPER_LOG_DIR', defaults.log_dir),
        upload_dir=_parse_path(env, 'LOOPER_UPLOAD_DIR', defaults.upload_dir),
        output_dir=_parse_path(env, 'LOOPER_OUTPUT_DIR', defaults.output_dir),
    )

    logger.debug(f"Loaded settings: {settings}")
    return settings
