"""
External audio tool adapters for blueme-converter

This module wraps the two external programs the conversion pipeline depends
on. Each adapter turns a pipeline request into an argument list, runs it
through ``run_streaming`` and reports a ``ProcessResult``.

Adapters:

**Transcoder (ffmpeg):**
- Converts any supported source format to constant bitrate MP3
- The command line is built with ffmpeg-python, so paths are passed as
  discrete arguments and never interpreted by a shell
- Video streams (embedded cover art) are dropped, the head unit ignores them
- ffmpeg writes to a partial file beside the destination, which replaces
  the destination only on success and is removed otherwise

**Normalizer (mp3gain):**
- Applies lossless ReplayGain track gain to an MP3 in place
- Success follows mp3gain's real exit status

Both adapters take their binary, parameters and timeout in the constructor
so tests and alternative back-ends can substitute them freely; the
``from_settings`` constructors read the application configuration.

Error Handling:
Neither adapter raises for tool failures. A missing binary, a non-zero exit
status or a timeout all come back as an unsuccessful ProcessResult, which
the pipeline reports for the current track before moving on.
"""

import os
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import ffmpeg

from .process import ProcessResult, run_streaming
from ..utils.logger import get_logger


LineCallback = Optional[Callable[[str], None]]


class Transcoder:
    """
    MP3 transcoder backed by the ffmpeg command line tool

    Attributes:
        binary: ffmpeg executable name or path
        bitrate: Target audio bitrate in ffmpeg notation ("320k")
        timeout: Wall-clock limit per file in seconds
    """

    def __init__(self, binary: str = "ffmpeg", bitrate: str = "320k", timeout: float = 160):
        self.binary = binary
        self.bitrate = bitrate
        self.timeout = timeout
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings) -> 'Transcoder':
        return cls(
            binary=settings.transcode.binary,
            bitrate=settings.transcode.bitrate,
            timeout=settings.transcode.timeout,
        )

    def build_command(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> list:
        """
        Build the ffmpeg argument list

        Args:
            input_path: Source audio file
            output_path: MP3 file to write (overwritten if present)

        Returns:
            Argument list starting with the ffmpeg binary
        """
        stream = (
            ffmpeg
            .input(str(input_path))
            .output(str(output_path), format='mp3', audio_bitrate=self.bitrate, vn=None)
            .global_args('-hide_banner')
            .overwrite_output()
        )
        return stream.compile(cmd=self.binary)

    @staticmethod
    def partial_path(output_path: Union[str, Path]) -> Path:
        """Hidden work file ffmpeg writes before the result is moved into place"""
        output_file = Path(output_path)
        return output_file.with_name(f".{output_file.name}.part")

    def transcode(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        on_line: LineCallback = None
    ) -> ProcessResult:
        """
        Convert a file to MP3

        Args:
            input_path: Source audio file
            output_path: Destination MP3 path
            on_line: Receives ffmpeg's output as it is produced

        Returns:
            ProcessResult; success additionally requires the output file to exist.
            A file already at output_path is only replaced on success.
        """
        output_file = Path(output_path)
        work_file = self.partial_path(output_file)
        result = run_streaming(
            self.build_command(input_path, work_file),
            timeout=self.timeout,
            on_line=on_line,
        )

        if result.success and not work_file.exists():
            result.error = f"{self.binary} produced no output file"
            result.returncode = -1

        if result.success:
            try:
                os.replace(work_file, output_file)
            except OSError as e:
                result.error = f"unable to move output into place: {e}"
                result.returncode = -1

        if not result.success:
            self.logger.debug(f"Transcode of {input_path} failed: {result.failure_reason}")
            if work_file.exists():
                work_file.unlink()

        return result


class Normalizer:
    """
    Loudness normalizer backed by mp3gain

    Attributes:
        binary: mp3gain executable name or path
        flags: Analysis/adjustment flags placed before the file name
        timeout: Wall-clock limit per file in seconds
    """

    DEFAULT_FLAGS = ("-p", "-r", "-c", "-s", "s")

    def __init__(
        self,
        binary: str = "mp3gain",
        flags: Sequence[str] = DEFAULT_FLAGS,
        timeout: float = 60
    ):
        self.binary = binary
        self.flags = list(flags)
        self.timeout = timeout
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings) -> 'Normalizer':
        return cls(
            binary=settings.normalize.binary,
            flags=settings.normalize.flags,
            timeout=settings.normalize.timeout,
        )

    def build_command(self, path: Union[str, Path]) -> list:
        return [self.binary, *self.flags, str(path)]

    def normalize(self, path: Union[str, Path], on_line: LineCallback = None) -> ProcessResult:
        """
        Normalize an MP3 file in place

        Args:
            path: MP3 file to adjust
            on_line: Receives mp3gain's output as it is produced

        Returns:
            ProcessResult reflecting mp3gain's exit status
        """
        result = run_streaming(self.build_command(path), timeout=self.timeout, on_line=on_line)
        if not result.success:
            self.logger.debug(f"Normalization of {path} failed: {result.failure_reason}")
        return result
