"""
Loop Pipeline Service

Drives one loop job through its stages:

    VALIDATING -> WRITING_MANIFEST -> LOOPING -> COMBINING -> CLEANING_UP -> DONE

Any expected failure moves the job to FAILED; temporary files acquired so far
are removed by the job's ScratchSpace on the way out.
"""

import time
import uuid
from pathlib import Path
from typing import Callable, Optional

from video_looper.config import LooperSettings, load_settings
from video_looper.constants import LoopDefaults, PipelineStage
from video_looper.dtos.internal import LoopJob, LoopResult
from video_looper.exceptions import ApplicationError, InvalidConfigurationError
from video_looper.services.ffmpeg_commands import build_combine_args, build_loop_args
from video_looper.services.input_validator import input_validator
from video_looper.services.manifest_writer import write_manifest
from video_looper.services.scratch_space import ScratchSpace
from video_looper.utils.logging_utils import StructuredLogger, clear_logging_context, log_operation, set_logging_context
from video_looper.utils.video_metadata import get_media_duration
from video_looper.workers.ffmpeg_runner import FFmpegRunner

logger = StructuredLogger(__name__)


class LoopPipeline:
    """
    Loops a video N times and muxes it with an audio track.

    The runner and duration probe are injectable so tests can run the
    pipeline without ffmpeg installed.
    """

    def __init__(
        self,
        settings: Optional[LooperSettings] = None,
        runner: Optional[FFmpegRunner] = None,
        probe: Optional[Callable[..., Optional[float]]] = None
    ):
        self.settings = settings or load_settings()
        self.runner = runner or FFmpegRunner(self.settings.ffmpeg_binary)
        self.probe = probe or get_media_duration

    def run(self, job: LoopJob) -> LoopResult:
        """
        Execute the job under a fresh job id.

        Every record logged while the job runs carries the job id and loop
        count.

        Args:
            job: Validated or unvalidated job description

        Returns:
            LoopResult; success is True only if the combine step succeeded
        """
        job_id = uuid.uuid4().hex[:8]
        set_logging_context(job_id=job_id, loops=job.loops)
        try:
            result = self._execute(job)
        finally:
            clear_logging_context()
        result.job_id = job_id
        return result

    @log_operation("loop_job")
    def _execute(self, job: LoopJob) -> LoopResult:
        started = time.monotonic()
        stage = PipelineStage.VALIDATING

        try:
            input_validator.validate_job(job, self.settings.max_loops)
            video_path = Path(job.video_path).expanduser().resolve()
            audio_path = Path(job.audio_path).expanduser().resolve()
            output_path = Path(job.output_path).expanduser().resolve()

            source_duration = self.probe(video_path, self.settings.ffprobe_binary)
            expected_duration = None
            if source_duration:
                expected_duration = source_duration * job.loops
                logger.info(f"Input video duration: {source_duration:.3f} seconds.")
                logger.info(f"Target looped video duration: {expected_duration:.3f} seconds.")

            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise InvalidConfigurationError(
                    "output_path",
                    str(output_path),
                    f"Cannot create output directory '{output_path.parent}': {e}"
                ) from e

            stage = PipelineStage.WRITING_MANIFEST
            with ScratchSpace(self.settings.scratch_dir, keep=self.settings.keep_temp) as scratch:
                manifest_path = scratch.acquire(LoopDefaults.MANIFEST_NAME)
                write_manifest(video_path, job.loops, manifest_path)

                stage = PipelineStage.LOOPING
                logger.info("Looping video (video stream only)...")
                looped_path = scratch.acquire(
                    f"{LoopDefaults.LOOPED_VIDEO_STEM}{video_path.suffix or '.mp4'}"
                )
                self.runner.run(build_loop_args(manifest_path, looped_path), stage.value)
                logger.info("Video looping successful.")

                stage = PipelineStage.COMBINING
                logger.info("Combining looped video with audio...")
                self.runner.run(
                    build_combine_args(
                        looped_path,
                        audio_path,
                        output_path,
                        audio_codec=self.settings.audio_codec,
                        audio_bitrate=self.settings.audio_bitrate,
                        full_hd=job.full_hd
                    ),
                    stage.value
                )
                logger.info("Video and audio combination successful.")

                stage = PipelineStage.CLEANING_UP

            stage = PipelineStage.DONE
            logger.info(f"✅ Successfully created '{output_path}' with {job.loops} loops and selected audio.")
            return LoopResult(
                success=True,
                stage=stage.value,
                output_path=output_path,
                loops=job.loops,
                source_duration=source_duration,
                expected_duration=expected_duration,
                processing_time_seconds=time.monotonic() - started
            )

        except ApplicationError as e:
            logger.error(f"{PipelineStage.get_ui_label(stage)} failed: {e.message}")
            return LoopResult(
                success=False,
                stage=stage.value,
                loops=job.loops,
                error_message=e.message,
                error=e,
                processing_time_seconds=time.monotonic() - started
            )


def create_looped_video(
    video_path,
    audio_path,
    loops: int,
    output_path,
    full_hd: bool = False,
    settings: Optional[LooperSettings] = None
) -> bool:
    """
    Loop `video_path` `loops` times, mux with `audio_path` and write `output_path`.

    Returns:
        True on success, False on any validation or processing failure
    """
    job = LoopJob.create(video_path, audio_path, loops, output_path, full_hd=full_hd)
    return LoopPipeline(settings).run(job).success
