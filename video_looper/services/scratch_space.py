"""
Scratch Space Service

Owns the temporary files of one loop job. A per-job directory is created on
entry; every artifact registers its own deletion when it is acquired, and the
registrations unwind in reverse order on every exit path.
"""

from contextlib import ExitStack
from pathlib import Path
from typing import List, Optional
import logging
import shutil
import tempfile

from video_looper.constants import LoopDefaults
from video_looper.exceptions import ManifestWriteError

logger = logging.getLogger(__name__)


class ScratchSpace:
    """
    Context manager for a job's temporary directory.

    Usage:
        with ScratchSpace(base_dir) as scratch:
            manifest = scratch.acquire("ffmpeg_concat_list.txt")
            ...
        # manifest and directory are gone here
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        prefix: str = LoopDefaults.SCRATCH_PREFIX,
        keep: bool = False
    ):
        """
        Args:
            base_dir: Parent for the scratch directory (system temp dir if None)
            prefix: Directory name prefix
            keep: Leave artifacts on disk for inspection
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.prefix = prefix
        self.keep = keep
        self.directory: Optional[Path] = None
        self.cleanup_failures: List[str] = []
        self._stack: Optional[ExitStack] = None

    def __enter__(self) -> "ScratchSpace":
        try:
            if self.base_dir is not None:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            self.directory = Path(tempfile.mkdtemp(
                prefix=self.prefix,
                dir=str(self.base_dir) if self.base_dir is not None else None
            ))
        except OSError as e:
            location = str(self.base_dir) if self.base_dir is not None else tempfile.gettempdir()
            raise ManifestWriteError(location, f"Could not create scratch directory in '{location}': {e}") from e

        logger.debug(f"Created scratch directory: {self.directory}")
        self._stack = ExitStack()
        self._stack.callback(self._remove_directory, self.directory)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._stack is not None:
            logger.info("Cleaning up temporary files...")
            self._stack.close()
            self._stack = None
            logger.info("Cleanup finished.")
        return False

    def acquire(self, name: str) -> Path:
        """
        Reserve a path inside the scratch directory and register its deletion.

        The file itself is created by the caller (or by ffmpeg).
        """
        if self._stack is None or self.directory is None:
            raise RuntimeError("ScratchSpace must be entered before acquiring artifacts")
        path = self.directory / name
        self._stack.callback(self._remove_file, path)
        return path

    def _remove_file(self, path: Path) -> None:
        if self.keep:
            logger.info(f"Keeping temporary file: {path}")
            return
        if not path.exists():
            return
        try:
            path.unlink()
            logger.info(f"Deleted: {path}")
        except OSError as e:
            self.cleanup_failures.append(str(path))
            logger.warning(f"Could not remove temporary file: {path} ({e})")

    def _remove_directory(self, directory: Path) -> None:
        if self.keep:
            return
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.cleanup_failures.append(str(directory))
            logger.warning(f"Could not remove scratch directory: {directory} ({e})")
