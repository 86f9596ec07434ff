"""
ImageMagick collaborators - external transform and dimension probe.

Both executables are invoked with an explicit argv list and a timeout.
A non-zero exit, a timeout or unreadable output is terminal for the
request; nothing is retried here.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Union

from api.exceptions import ExternalProcessFailedException, SourceProbeFailedException
from core.constants import ProcessConstants
from schemas.iiif import SourceDimensions

logger = logging.getLogger(__name__)


def parse_dimensions(output: str) -> SourceDimensions:
    """
    Parse ``identify -format "%w,%h\\n"`` output.

    Multi-frame sources print one line per frame; the first frame wins.

    Raises:
        ValueError: If the output is not a "width,height" pair
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if not lines:
        raise ValueError("empty identify output")

    parts = lines[0].split(",")
    if len(parts) != 2:
        raise ValueError(f"unexpected identify output: {lines[0]!r}")

    width, height = int(parts[0]), int(parts[1])
    return SourceDimensions(width=width, height=height)


class ImageMagick:
    """Runs convert and identify as blocking, bounded-time subprocesses"""

    def __init__(
        self,
        convert_binary: str = "convert",
        identify_binary: str = "identify",
        timeout_seconds: float = ProcessConstants.DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize ImageMagick runner

        Args:
            convert_binary: Path or name of the convert executable
            identify_binary: Path or name of the identify executable
            timeout_seconds: Per-invocation timeout
        """
        self.convert_binary = convert_binary
        self.identify_binary = identify_binary
        self.timeout_seconds = timeout_seconds

    def _run(self, argv: List[str]) -> bytes:
        binary = argv[0]
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"{binary} timed out after {self.timeout_seconds}s, args were: {argv[1:]}")
            raise ExternalProcessFailedException(
                binary, f"timed out after {self.timeout_seconds}s"
            )
        except OSError as e:
            logger.error(f"Couldn't start {binary}: {e}")
            raise ExternalProcessFailedException(binary, str(e))

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            stderr = stderr[: ProcessConstants.MAX_STDERR_CHARS]
            logger.error(
                f"{binary} exited with {completed.returncode}, args were: {argv[1:]}, stderr: {stderr}"
            )
            raise ExternalProcessFailedException(
                binary, f"exit status {completed.returncode}: {stderr}", completed.returncode
            )

        return completed.stdout

    def transform(self, args: List[str]) -> bytes:
        """
        Run convert with a synthesized argument vector.

        Args:
            args: Arguments from core.transform_args.synthesize

        Returns:
            Encoded output image read from stdout
        """
        output = self._run([self.convert_binary, *args])
        if not output:
            raise ExternalProcessFailedException(self.convert_binary, "no output produced")
        return output

    def probe(self, path: Union[str, Path]) -> SourceDimensions:
        """
        Read the native dimensions of a stored image without decoding pixels.

        Raises:
            SourceProbeFailedException: identify failed or printed garbage
        """
        argv = [self.identify_binary, "-ping", "-format", ProcessConstants.PROBE_FORMAT, str(path)]
        try:
            output = self._run(argv)
            return parse_dimensions(output.decode("utf-8", errors="replace"))
        except ExternalProcessFailedException as e:
            raise SourceProbeFailedException(str(path), e.detail)
        except ValueError as e:
            logger.error(f"Unreadable identify output for {path}: {e}")
            raise SourceProbeFailedException(str(path), str(e))
