import logging
import os
import sys
from pathlib import Path

import pytest

from conftest import FakeFFmpegRunner, scratch_leftovers
from video_looper.constants import PipelineStage
from video_looper.dtos.internal import LoopJob
from video_looper.exceptions import FFmpegError, InvalidConfigurationError, ManifestWriteError, MissingInputError
from video_looper.services import loop_pipeline
from video_looper.services.loop_pipeline import create_looped_video
from video_looper.utils.logging_utils import LOG_FILE_NAME, configure_logging


@pytest.fixture
def job(media_dir, tmp_path):
    return LoopJob.create(media_dir / "input.mp4", media_dir / "audio.mp3", 3, tmp_path / "out" / "final.mp4")


class TestSuccessfulRun:
    def test_three_loops_scenario(self, make_pipeline, job, scratch_dir):
        runner = FakeFFmpegRunner()
        result = make_pipeline(runner=runner).run(job)

        assert result.success is True
        assert result.stage == PipelineStage.DONE.value
        assert result.output_path == job.output_path.resolve()
        assert job.output_path.exists()

        # manifest listed the same absolute path once per loop
        assert len(runner.manifest_lines) == 3
        assert len(set(runner.manifest_lines)) == 1
        assert str(job.video_path.resolve().as_posix()) in runner.manifest_lines[0]

        # temporaries are gone
        assert runner.scratch_files
        assert not any(p.exists() for p in runner.scratch_files)
        assert scratch_leftovers(scratch_dir) == []

    def test_expected_duration_from_probe(self, make_pipeline, job):
        result = make_pipeline(probe_duration=1.0).run(job)
        assert result.source_duration == 1.0
        assert result.expected_duration == pytest.approx(3.0)

    def test_probe_failure_is_not_fatal(self, make_pipeline, job):
        result = make_pipeline(probe_duration=None).run(job)
        assert result.success is True
        assert result.expected_duration is None

    def test_steps_run_in_order(self, make_pipeline, job):
        runner = FakeFFmpegRunner()
        make_pipeline(runner=runner).run(job)

        stages = [stage for stage, _ in runner.calls]
        assert stages == ["LOOPING", "COMBINING"]

        loop_args, combine_args = runner.calls[0][1], runner.calls[1][1]
        looped_output = loop_args[-1]
        assert combine_args[combine_args.index('-i') + 1] == looped_output
        assert str(job.audio_path.resolve()) in combine_args
        assert combine_args[-1] == str(job.output_path.resolve())

    def test_intermediate_keeps_source_suffix(self, make_pipeline, media_dir, tmp_path):
        (media_dir / "clip.mov").write_bytes(b"mov")
        runner = FakeFFmpegRunner()
        job = LoopJob.create(media_dir / "clip.mov", media_dir / "audio.mp3", 2, tmp_path / "final.mov")
        make_pipeline(runner=runner).run(job)
        assert runner.calls[0][1][-1].endswith(".mov")

    @pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts arbitrary name bytes")
    def test_undecodable_video_name(self, make_pipeline, media_dir, tmp_path, scratch_dir):
        video = media_dir / os.fsdecode(b"clip\xff.mp4")
        video.write_bytes(b"\x00\x00\x00\x18ftypmp42video")
        runner = FakeFFmpegRunner()
        job = LoopJob.create(video, media_dir / "audio.mp3", 2, tmp_path / "final.mp4")

        result = make_pipeline(runner=runner).run(job)

        assert result.success is True
        assert runner.manifest_lines == [f"file '{video.resolve()}'"] * 2
        assert scratch_leftovers(scratch_dir) == []

    def test_full_hd_flag_reaches_combine_step(self, make_pipeline, media_dir, tmp_path):
        runner = FakeFFmpegRunner()
        job = LoopJob.create(media_dir / "input.mp4", media_dir / "audio.mp3", 2, tmp_path / "hd.mp4", full_hd=True)
        make_pipeline(runner=runner).run(job)
        combine_args = runner.calls[1][1]
        assert combine_args[combine_args.index('-c:v') + 1] == 'libx264'

    def test_keep_temp_leaves_artifacts(self, make_pipeline, job, settings):
        runner = FakeFFmpegRunner()
        result = make_pipeline(runner=runner, pipeline_settings=settings.with_overrides(keep_temp=True)).run(job)
        assert result.success
        assert all(p.exists() for p in runner.scratch_files)


class TestValidationFailures:
    def test_zero_loops_creates_nothing(self, make_pipeline, media_dir, tmp_path, scratch_dir):
        runner = FakeFFmpegRunner()
        job = LoopJob.create(media_dir / "input.mp4", media_dir / "audio.mp3", 0, tmp_path / "out" / "final.mp4")
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert result.stage == PipelineStage.VALIDATING.value
        assert isinstance(result.error, InvalidConfigurationError)
        assert runner.calls == []
        assert not scratch_dir.exists()
        assert not (tmp_path / "out").exists()

    def test_missing_video_creates_nothing(self, make_pipeline, media_dir, tmp_path, scratch_dir):
        runner = FakeFFmpegRunner()
        job = LoopJob.create(media_dir / "missing.mp4", media_dir / "audio.mp3", 3, tmp_path / "final.mp4")
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert isinstance(result.error, MissingInputError)
        assert "missing.mp4" in result.error_message
        assert runner.calls == []
        assert not scratch_dir.exists()

    def test_missing_audio_creates_nothing(self, make_pipeline, media_dir, tmp_path, scratch_dir):
        runner = FakeFFmpegRunner()
        job = LoopJob.create(media_dir / "input.mp4", media_dir / "missing.mp3", 3, tmp_path / "final.mp4")
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert isinstance(result.error, MissingInputError)
        assert result.error.role == "audio"
        assert not scratch_dir.exists()
        assert not (tmp_path / "final.mp4").exists()

    def test_loops_above_ceiling(self, make_pipeline, job, settings):
        pipeline = make_pipeline(pipeline_settings=settings.with_overrides(max_loops=2))
        result = pipeline.run(job)
        assert result.success is False
        assert "between 1 and 2" in result.error_message


class TestStageFailures:
    def test_loop_stage_failure(self, make_pipeline, job, scratch_dir):
        runner = FakeFFmpegRunner(fail_stage="LOOPING")
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert result.stage == PipelineStage.LOOPING.value
        assert isinstance(result.error, FFmpegError)
        assert [stage for stage, _ in runner.calls] == ["LOOPING"]
        # manifest was written, then removed; intermediate never produced
        assert len(runner.manifest_lines) == 3
        assert scratch_leftovers(scratch_dir) == []
        assert not job.output_path.exists()

    def test_combine_stage_failure(self, make_pipeline, job, scratch_dir):
        runner = FakeFFmpegRunner(fail_stage="COMBINING", returncode=254)
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert result.stage == PipelineStage.COMBINING.value
        assert result.error.returncode == 254
        assert "Invalid data" in result.error.stderr_tail
        assert runner.scratch_files
        assert not any(p.exists() for p in runner.scratch_files)
        assert scratch_leftovers(scratch_dir) == []

    def test_manifest_write_failure(self, make_pipeline, job, monkeypatch):
        def broken_writer(video_path, loops, manifest_path):
            raise ManifestWriteError(str(manifest_path), "disk full")

        monkeypatch.setattr(loop_pipeline, "write_manifest", broken_writer)
        runner = FakeFFmpegRunner()
        result = make_pipeline(runner=runner).run(job)

        assert result.success is False
        assert result.stage == PipelineStage.WRITING_MANIFEST.value
        assert runner.calls == []

    def test_unexpected_errors_propagate(self, make_pipeline, job):
        class ExplodingRunner(FakeFFmpegRunner):
            def run(self, args, stage):
                raise KeyError("bug")

        with pytest.raises(KeyError):
            make_pipeline(runner=ExplodingRunner()).run(job)


class TestJobLogging:
    def test_every_pipeline_record_carries_the_job_id(self, make_pipeline, job, caplog):
        with caplog.at_level(logging.DEBUG):
            result = make_pipeline().run(job)

        records = [r for r in caplog.records if r.name == loop_pipeline.__name__]
        assert len(records) > 2
        assert result.job_id
        assert {getattr(r, "job_id", None) for r in records} == {result.job_id}
        assert {getattr(r, "loops", None) for r in records} == {3}

    def test_failed_job_records_carry_the_job_id(self, make_pipeline, job, caplog):
        with caplog.at_level(logging.DEBUG):
            result = make_pipeline(runner=FakeFFmpegRunner(fail_stage="COMBINING")).run(job)

        failure = next(r for r in caplog.records if "failed" in r.getMessage())
        assert failure.job_id == result.job_id

    def test_log_lines_show_the_job_id(self, make_pipeline, job, tmp_path):
        configure_logging(log_dir=tmp_path / "logs")
        result = make_pipeline().run(job)
        logging.getLogger("video_looper.test").info("between jobs")

        for handler in logging.getLogger().handlers:
            handler.flush()
        text = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding='utf-8')
        assert f"[{result.job_id}] Creating concatenation file" in text
        assert f"[{result.job_id}] Cleanup finished." in text
        assert "[-] between jobs" in text


def test_create_looped_video_returns_bool(media_dir, tmp_path, settings, monkeypatch):
    monkeypatch.setattr(loop_pipeline, "FFmpegRunner", lambda binary=None: FakeFFmpegRunner())
    monkeypatch.setattr(loop_pipeline, "get_media_duration", lambda path, binary=None: 1.0)

    ok = create_looped_video(media_dir / "input.mp4", media_dir / "audio.mp3", 2, tmp_path / "a.mp4", settings=settings)
    failed = create_looped_video(media_dir / "input.mp4", media_dir / "audio.mp3", 0, tmp_path / "b.mp4", settings=settings)

    assert ok is True
    assert failed is False
    assert Path(tmp_path / "a.mp4").exists()
