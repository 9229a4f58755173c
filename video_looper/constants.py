"""
Application-wide constants.

This module centralizes the magic strings and numbers used by the loop
pipeline, the command-line entry point and the HTTP front end.
"""
from enum import Enum


class PipelineStage(str, Enum):
    """
    Stages of a single loop job.

    VALIDATING -> WRITING_MANIFEST -> LOOPING -> COMBINING -> CLEANING_UP -> DONE
    FAILED is reachable from every stage.
    """

    VALIDATING = 'VALIDATING'
    WRITING_MANIFEST = 'WRITING_MANIFEST'
    LOOPING = 'LOOPING'
    COMBINING = 'COMBINING'
    CLEANING_UP = 'CLEANING_UP'
    DONE = 'DONE'
    FAILED = 'FAILED'

    @classmethod
    def get_ui_label(cls, stage: 'PipelineStage') -> str:
        """Get human-readable label for console and API messages"""
        labels = {
            cls.VALIDATING: "Validating inputs",
            cls.WRITING_MANIFEST: "Writing concat manifest",
            cls.LOOPING: "Looping video",
            cls.COMBINING: "Combining video and audio",
            cls.CLEANING_UP: "Cleaning up temporary files",
            cls.DONE: "Done",
            cls.FAILED: "Failed",
        }
        return labels.get(stage, "Unknown stage")


class FFmpegDefaults:
    """Codec settings passed to ffmpeg"""

    AUDIO_CODEC = "aac"
    AUDIO_BITRATE = "192k"
    VIDEO_COPY = "copy"

    # Full HD re-encode (combine step only)
    FULL_HD_CODEC = "libx264"
    FULL_HD_SCALE = "scale=1920:1080"
    FULL_HD_PRESET = "medium"
    FULL_HD_CRF = "23"

    # Lines of ffmpeg stderr kept for error reports
    STDERR_TAIL_LINES = 40


class LoopDefaults:
    """Defaults for a loop job when nothing else is configured"""

    INPUT_VIDEO = "input.mp4"
    INPUT_AUDIO = "audio.mp3"
    NUM_LOOPS = 225
    OUTPUT_VIDEO = "final_looped_video.mp4"
    MAX_LOOPS = 1000

    MANIFEST_NAME = "ffmpeg_concat_list.txt"
    LOOPED_VIDEO_STEM = "temp_looped_video_only"
    SCRATCH_PREFIX = "video_looper_"

    # Commands printed when sample inputs are missing
    DUMMY_VIDEO_COMMAND = (
        "ffmpeg -y -f lavfi -i color=c=black:s=1280x720:d=1 "
        "-f lavfi -i anullsrc=channel_layout=stereo:sample_rate=44100 "
        "-c:v libx264 -c:a aac -t 1 input.mp4"
    )
    DUMMY_AUDIO_COMMAND = (
        "ffmpeg -y -f lavfi -i anullsrc=channel_layout=stereo:sample_rate=44100 "
        "-t 5 audio.mp3"
    )


class UploadLimits:
    """Constraints for files accepted by the HTTP front end"""

    MAX_FILE_SIZE = 500 * 1024 * 1024  # 500MB
    ALLOWED_VIDEO_TYPES = ('video/mp4',)
    ALLOWED_AUDIO_TYPES = ('audio/mpeg', 'audio/wav', 'audio/mp3')
    ERROR_DETAIL_CHARS = 300


class ServerConfig:
    """Server configuration constants"""

    HOST = "127.0.0.1"
    PORT = 3000


class HTTPStatus:
    """HTTP status codes used throughout the application"""

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_ENTITY_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class ExitCode:
    """Process exit codes for the command-line entry point"""

    SUCCESS = 0
    FAILURE = 1
