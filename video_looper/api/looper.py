"""
Loop API Endpoints

Accepts a video and an audio upload, runs the loop pipeline and serves the
processed file.
"""

import asyncio
import logging
import re
import time
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from video_looper.config import LooperSettings, load_settings
from video_looper.constants import HTTPStatus, UploadLimits
from video_looper.dtos.internal import LoopJob
from video_looper.dtos.response import ProcessVideoResponse
from video_looper.exceptions import InvalidConfigurationError, ValidationError
from video_looper.services.input_validator import input_validator
from video_looper.services.job_lock import job_lock, shutting_down
from video_looper.services.loop_pipeline import LoopPipeline
from video_looper.utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9_.-]')
_CHUNK_SIZE = 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> LooperSettings:
    """Settings dependency (read once per process)."""
    return load_settings()


def get_pipeline(settings: LooperSettings = Depends(get_settings)) -> LoopPipeline:
    """Pipeline dependency; overridden in tests."""
    return LoopPipeline(settings)


def sanitize_name(name: str) -> str:
    """Replace characters that are unsafe in file names."""
    return _UNSAFE_CHARS.sub('_', name) or "upload"


def _check_content_type(upload: UploadFile, allowed: tuple, label: str) -> None:
    if upload.content_type not in allowed:
        raise ValidationError(
            f"Only {label} files are allowed!",
            invalid_fields={"content_type": upload.content_type}
        )


async def _store_upload(upload: UploadFile, upload_dir: Path) -> Path:
    """Copy an upload to upload_dir under a unique name, enforcing the size limit."""
    original = Path(upload.filename or "upload").name
    target = upload_dir / f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{sanitize_name(original)}"

    written = 0
    with open(target, 'wb') as f:
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > UploadLimits.MAX_FILE_SIZE:
                f.close()
                target.unlink()
                raise HTTPException(
                    status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
                    detail=f"File size too large. Maximum is {UploadLimits.MAX_FILE_SIZE // (1024 * 1024)}MB."
                )
            f.write(chunk)
    return target


def _remove_uploads(paths) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete uploaded file {path}: {e}")


@router.post("/process-video", response_model=ProcessVideoResponse)
@handle_api_errors("Video processing")
async def process_video(
    videoFile: UploadFile = File(...),
    audioFile: UploadFile = File(...),
    numLoops: str = Form(...),
    fullHD: Optional[str] = Form(None),
    settings: LooperSettings = Depends(get_settings),
    pipeline: LoopPipeline = Depends(get_pipeline),
):
    """
    Loop the uploaded video `numLoops` times and mux it with the uploaded audio.

    Jobs run one at a time; a second request waits for the first to finish.
    """
    if shutting_down.is_set():
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Server is shutting down")

    _check_content_type(videoFile, UploadLimits.ALLOWED_VIDEO_TYPES, "MP4 video")
    _check_content_type(audioFile, UploadLimits.ALLOWED_AUDIO_TYPES, "MP3 and WAV audio")

    try:
        loops = int(numLoops)
    except ValueError:
        raise InvalidConfigurationError(
            "numLoops",
            numLoops,
            f"Number of loops must be an integer between 1 and {settings.max_loops}."
        )
    input_validator.validate_loop_count(loops, settings.max_loops)

    upload_dir = Path(settings.upload_dir)
    output_dir = Path(settings.output_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = sanitize_name(Path(videoFile.filename or "video").stem)
    output_name = f"looped_{stem}_{int(time.time() * 1000)}.mp4"

    stored = []
    try:
        stored.append(await _store_upload(videoFile, upload_dir))
        stored.append(await _store_upload(audioFile, upload_dir))

        job = LoopJob.create(
            stored[0],
            stored[1],
            loops,
            output_dir / output_name,
            full_hd=(fullHD or '').lower() == 'true'
        )

        async with job_lock:
            logger.info(f"Processing upload {videoFile.filename} with {loops} loops")
            result = await asyncio.to_thread(pipeline.run, job)

        if not result.success:
            raise result.error

        return ProcessVideoResponse(
            success=True,
            message="Video processed successfully!",
            downloadUrl=f"/api/processed/{output_name}",
            outputFileName=output_name,
            loops=loops,
            expectedDuration=result.expected_duration,
        )
    finally:
        _remove_uploads(stored)


@router.get("/processed/{file_name}")
async def get_processed_video(file_name: str, settings: LooperSettings = Depends(get_settings)):
    """Serve a processed video by name."""
    if Path(file_name).name != file_name:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="File not found")

    path = Path(settings.output_dir) / file_name
    if not path.is_file():
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="File not found")

    return FileResponse(path, media_type="video/mp4", filename=file_name)
