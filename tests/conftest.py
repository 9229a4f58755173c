import sys
import logging
from pathlib import Path

# Add project root to Python path FIRST
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Now import after path is set
import pytest
from video_looper.config import LooperSettings
from video_looper.exceptions import FFmpegError
from video_looper.services.loop_pipeline import LoopPipeline


class FakeFFmpegRunner:
    """Stands in for FFmpegRunner: records calls and writes the declared output."""

    def __init__(self, fail_stage=None, returncode=1, stderr_tail="Invalid data found when processing input"):
        self.fail_stage = fail_stage
        self.returncode = returncode
        self.stderr_tail = stderr_tail
        self.calls = []
        self.manifest_lines = None
        self.scratch_files = []

    def run(self, args, stage):
        args = [str(arg) for arg in args]
        self.calls.append((stage, args))

        if stage == "LOOPING":
            manifest = Path(args[args.index('-i') + 1])
            self.manifest_lines = manifest.read_text(encoding='utf-8', errors='surrogateescape').splitlines()
            self.scratch_files.append(manifest)

        if stage == self.fail_stage:
            raise FFmpegError(stage, self.returncode, self.stderr_tail)

        output = Path(args[-1])
        output.write_bytes(b"\x00\x00\x00\x18ftypmp42")
        if stage == "LOOPING":
            self.scratch_files.append(output)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging so they don't outlive captured streams"""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, '_video_looper', False):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def media_dir(tmp_path):
    """Directory holding a fake 1s video and 5s audio source"""
    directory = tmp_path / "media"
    directory.mkdir()
    (directory / "input.mp4").write_bytes(b"\x00\x00\x00\x18ftypmp42video")
    (directory / "audio.mp3").write_bytes(b"ID3audio")
    return directory


@pytest.fixture
def scratch_dir(tmp_path):
    return tmp_path / "scratch"


@pytest.fixture
def settings(tmp_path, scratch_dir):
    return LooperSettings(
        scratch_dir=scratch_dir,
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "processed",
    )


@pytest.fixture
def fake_runner():
    return FakeFFmpegRunner()


@pytest.fixture
def make_pipeline(settings):
    """Factory for pipelines backed by a fake runner and a 1-second probe"""
    def _make(runner=None, probe_duration=1.0, pipeline_settings=None):
        return LoopPipeline(
            settings=pipeline_settings or settings,
            runner=runner or FakeFFmpegRunner(),
            probe=lambda path, binary=None: probe_duration,
        )
    return _make


def scratch_leftovers(scratch_dir: Path):
    """All files left under the scratch directory"""
    if not scratch_dir.exists():
        return []
    return [p for p in scratch_dir.rglob('*') if p.is_file()]
