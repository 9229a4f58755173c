"""
Command-line entry point.

    video-looper [VIDEO] [AUDIO] [-n LOOPS] [-o OUTPUT] [--full-hd] [--keep-temp] [-v]
    video-looper serve [--host HOST] [--port PORT]
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from video_looper import __version__
from video_looper.config import load_settings
from video_looper.constants import ExitCode, LoopDefaults, ServerConfig
from video_looper.dtos.internal import LoopJob
from video_looper.exceptions import ConfigurationError, MissingInputError
from video_looper.services.loop_pipeline import LoopPipeline
from video_looper.utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video-looper",
        description="Loop a video N times and mux it with a separate audio track using ffmpeg."
    )
    parser.add_argument("video", nargs="?", default=LoopDefaults.INPUT_VIDEO,
                        help=f"Input video file (default: {LoopDefaults.INPUT_VIDEO})")
    parser.add_argument("audio", nargs="?", default=LoopDefaults.INPUT_AUDIO,
                        help=f"Input audio file (default: {LoopDefaults.INPUT_AUDIO})")
    parser.add_argument("-n", "--loops", type=int, default=LoopDefaults.NUM_LOOPS,
                        help=f"Number of times to repeat the video (default: {LoopDefaults.NUM_LOOPS})")
    parser.add_argument("-o", "--output", default=LoopDefaults.OUTPUT_VIDEO,
                        help=f"Output video file (default: {LoopDefaults.OUTPUT_VIDEO})")
    parser.add_argument("--full-hd", action="store_true",
                        help="Re-encode the video to 1920x1080 instead of stream copying it")
    parser.add_argument("--keep-temp", action="store_true",
                        help="Keep the concat manifest and intermediate video for inspection")
    parser.add_argument("--scratch-dir", type=Path, default=None,
                        help="Parent directory for the job's temporary files")
    parser.add_argument("--ffmpeg", default=None, help="ffmpeg executable to use")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_serve_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video-looper serve",
        description="Start the HTTP upload front end."
    )
    parser.add_argument("--host", default=ServerConfig.HOST, help=f"Bind address (default: {ServerConfig.HOST})")
    parser.add_argument("--port", type=int, default=ServerConfig.PORT, help=f"Port (default: {ServerConfig.PORT})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_missing_input_hint(error: MissingInputError) -> None:
    if error.role == "video":
        logger.error("To create a dummy 1-second black video (input.mp4):")
        logger.error(LoopDefaults.DUMMY_VIDEO_COMMAND)
    else:
        logger.error("To create a dummy 5-second silent audio (audio.mp3):")
        logger.error(LoopDefaults.DUMMY_AUDIO_COMMAND)


def run_serve(argv: List[str]) -> int:
    args = build_serve_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging(logging.DEBUG if args.verbose else logging.INFO)
        logger.error(f"Configuration error: {e.message}")
        return ExitCode.FAILURE

    configure_logging(logging.DEBUG if args.verbose else logging.INFO, settings.log_dir)

    from video_looper.main import serve
    return ExitCode.SUCCESS if serve(args.host, args.port) else ExitCode.FAILURE


def run_loop(argv: List[str]) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO

    try:
        settings = load_settings().with_overrides(
            ffmpeg_binary=args.ffmpeg,
            scratch_dir=args.scratch_dir,
            keep_temp=True if args.keep_temp else None,
        )
    except ConfigurationError as e:
        configure_logging(level)
        logger.error(f"Configuration error: {e.message}")
        return ExitCode.FAILURE

    configure_logging(level, settings.log_dir)

    logger.info("Starting video processing...")
    logger.info(f"Input Video: {Path(args.video).resolve()}")
    logger.info(f"Input Audio: {Path(args.audio).resolve()}")
    logger.info(f"Number of Loops: {args.loops}")
    logger.info(f"Output Video: {Path(args.output).resolve()}")

    job = LoopJob.create(args.video, args.audio, args.loops, args.output, full_hd=args.full_hd)
    result = LoopPipeline(settings).run(job)

    if result.success:
        logger.info("Video processing finished successfully.")
        return ExitCode.SUCCESS

    logger.error(f"Error: {result.error_message}")
    if isinstance(result.error, MissingInputError):
        _print_missing_input_hint(result.error)
    logger.error("Video processing failed.")
    return ExitCode.FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    if argv and argv[0] == "serve":
        return run_serve(argv[1:])
    return run_loop(argv)


if __name__ == "__main__":
    sys.exit(main())
