"""
HTTP front end for the loop pipeline.

Run with `video-looper serve` or `python -m video_looper.main`.
"""
from contextlib import asynccontextmanager
import logging
import socket

from fastapi import Depends, FastAPI

from video_looper import __version__
from video_looper.api import looper
from video_looper.constants import ServerConfig
from video_looper.dtos.response import HealthResponse
from video_looper.config import LooperSettings
from video_looper.exceptions import FFmpegNotFoundError
from video_looper.services.job_lock import set_shutting_down
from video_looper.utils.ffmpeg_helper import get_ffmpeg_path

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = looper.get_settings()
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Uploads temporarily in: {settings.upload_dir.resolve()}")
    logger.info(f"Processed videos in: {settings.output_dir.resolve()} (served via /api/processed)")
    yield
    set_shutting_down()
    logger.info("Shutting down video looper server")


app = FastAPI(title="Video Looper API", version=__version__, lifespan=lifespan)
app.include_router(looper.router, prefix="/api", tags=["looper"])


@app.get("/api/health", response_model=HealthResponse)
def health_check(settings: LooperSettings = Depends(looper.get_settings)):
    """Health check endpoint"""
    try:
        get_ffmpeg_path(settings.ffmpeg_binary)
        ffmpeg_available = True
    except FFmpegNotFoundError:
        ffmpeg_available = False

    return HealthResponse(
        status="ok",
        service="Video Looper API",
        version=__version__,
        ffmpeg_available=ffmpeg_available,
    )


@app.get("/")
def root():
    """Root endpoint - API only mode"""
    return {
        "message": "Video Looper API",
        "docs": "/docs",
        "health": "/api/health",
        "process": "POST /api/process-video (videoFile, audioFile, numLoops, fullHD)"
    }


def is_port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True


def serve(host: str = ServerConfig.HOST, port: int = ServerConfig.PORT) -> bool:
    """
    Start the server (blocking).

    Returns:
        False if the port is already taken, True after a clean shutdown
    """
    import uvicorn

    if is_port_in_use(host, port):
        logger.error(f"❌ Port {port} is already in use!")
        logger.error("   Another instance of the video looper may be running.")
        return False

    logger.info(f"🚀 Server listening at http://{host}:{port}")
    logger.info("Ensure FFmpeg and ffprobe are installed and in your system's PATH.")
    uvicorn.run(app, host=host, port=port)
    return True


if __name__ == "__main__":
    from video_looper.utils.logging_utils import configure_logging

    configure_logging(log_dir=looper.get_settings().log_dir)
    serve()
