import subprocess
import sys
from collections import deque
from typing import List, Optional, Sequence, TextIO
import logging

from video_looper.constants import FFmpegDefaults
from video_looper.exceptions import FFmpegError, FFmpegNotFoundError
from video_looper.utils.ffmpeg_helper import get_ffmpeg_path

logger = logging.getLogger(__name__)


class FFmpegRunner:
    def __init__(
        self,
        binary: Optional[str] = None,
        echo_stream: Optional[TextIO] = None,
        tail_lines: int = FFmpegDefaults.STDERR_TAIL_LINES
    ):
        """
        Args:
            binary: ffmpeg override (path or command name); resolved lazily
            echo_stream: Where ffmpeg's stderr is mirrored (sys.stderr if None)
            tail_lines: Number of stderr lines kept for error reports
        """
        self.binary = binary
        self.echo_stream = echo_stream
        self.tail_lines = tail_lines
        self._resolved: Optional[str] = None

    @property
    def executable(self) -> str:
        if self._resolved is None:
            self._resolved = get_ffmpeg_path(self.binary)
        return self._resolved

    def run(self, args: Sequence, stage: str) -> subprocess.CompletedProcess:
        """Run ffmpeg with an explicit argument list and block until it exits

        stdout is inherited. stderr is mirrored line by line to the console
        and its last lines are kept for the error report.

        Args:
            args: Arguments following the executable name
            stage: Pipeline stage name, attached to any error

        Returns:
            CompletedProcess whose stderr holds the retained tail

        Raises:
            FFmpegNotFoundError: If ffmpeg cannot be started
            FFmpegError: If ffmpeg exits with a non-zero code
        """
        cmd: List[str] = [self.executable] + [str(arg) for arg in args]
        logger.info(f"Executing: {subprocess.list2cmdline(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace'
            )
        except OSError as e:
            logger.error(f"Failed to start subprocess for {cmd[0]}: {e}")
            raise FFmpegNotFoundError(cmd[0], stage) from e

        echo = self.echo_stream or sys.stderr
        tail = deque(maxlen=self.tail_lines)
        with process:
            for line in process.stderr:
                echo.write(line)
                tail.append(line.rstrip('\n'))
            returncode = process.wait()

        stderr_tail = '\n'.join(tail)

        if returncode != 0:
            logger.error(f"ffmpeg failed with code {returncode} during {stage}")
            raise FFmpegError(stage, returncode, stderr_tail)

        logger.debug(f"ffmpeg {stage} step completed successfully")
        return subprocess.CompletedProcess(cmd, returncode, None, stderr_tail)
