"""
FFmpeg argument builders for the two pipeline steps.

Arguments are returned as lists (without the executable) so they can be
passed straight to subprocess without a shell.
"""
from pathlib import Path
from typing import List

from video_looper.constants import FFmpegDefaults


def build_loop_args(manifest_path: Path, looped_video_path: Path) -> List[str]:
    """
    Concatenate the manifest entries into a video-only file by stream copy.

    `-safe 0` lets the concat demuxer accept absolute paths.
    """
    return [
        '-y',
        '-f', 'concat',
        '-safe', '0',
        '-i', str(manifest_path),
        '-an',
        '-c:v', FFmpegDefaults.VIDEO_COPY,
        str(looped_video_path),
    ]


def build_combine_args(
    looped_video_path: Path,
    audio_path: Path,
    output_path: Path,
    audio_codec: str = FFmpegDefaults.AUDIO_CODEC,
    audio_bitrate: str = FFmpegDefaults.AUDIO_BITRATE,
    full_hd: bool = False
) -> List[str]:
    """
    Mux the looped video with the audio track, trimmed to the shorter input.

    Video is stream-copied unless `full_hd` asks for a 1080p re-encode.
    """
    if full_hd:
        video_args = [
            '-c:v', FFmpegDefaults.FULL_HD_CODEC,
            '-vf', FFmpegDefaults.FULL_HD_SCALE,
            '-preset', FFmpegDefaults.FULL_HD_PRESET,
            '-crf', FFmpegDefaults.FULL_HD_CRF,
        ]
    else:
        video_args = ['-c:v', FFmpegDefaults.VIDEO_COPY]

    return [
        '-y',
        '-i', str(looped_video_path),
        '-i', str(audio_path),
        '-map', '0:v:0',
        '-map', '1:a:0',
        *video_args,
        '-c:a', audio_codec,
        '-b:a', audio_bitrate,
        '-shortest',
        str(output_path),
    ]
