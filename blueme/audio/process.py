"""
Blocking external process execution with streamed output

Every external tool (ffmpeg, mp3gain) is started through ``run_streaming``:
arguments are passed as a list, never through a shell, stdout and stderr are
merged and forwarded line by line while the process runs, and a watchdog
timer kills the process once the timeout expires. The caller blocks until
the process has exited or has been killed.
"""

import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class ProcessResult:
    """
    Outcome of one external process run

    Attributes:
        args: Argument list that was executed
        returncode: Exit status, None if the process could not be started
        output: Combined stdout/stderr text
        timed_out: True if the watchdog killed the process
        error: Startup failure description (binary missing, permission denied)
    """
    args: List[str]
    returncode: Optional[int]
    output: str = ""
    timed_out: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def failure_reason(self) -> str:
        """Short description of why the run failed"""
        if self.error:
            return self.error
        if self.timed_out:
            return "timed out"
        if self.returncode not in (0, None):
            return f"exit status {self.returncode}"
        return ""


def run_streaming(
    args: Sequence[str],
    timeout: Optional[float] = None,
    on_line: Optional[Callable[[str], None]] = None
) -> ProcessResult:
    """
    Run a command, forwarding its output line by line

    Args:
        args: Program and arguments
        timeout: Wall-clock limit in seconds (None = unlimited)
        on_line: Callback receiving each output line without trailing newline

    Returns:
        ProcessResult; never raises for missing binaries or timeouts
    """
    args = [str(arg) for arg in args]
    logger.debug(f"Running: {' '.join(args)}")

    try:
        process = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding='utf-8',
            errors='replace',
            bufsize=1,
        )
    except FileNotFoundError:
        return ProcessResult(args=args, returncode=None, error=f"{args[0]} not found")
    except OSError as e:
        return ProcessResult(args=args, returncode=None, error=f"cannot start {args[0]}: {e}")

    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        process.kill()

    watchdog = threading.Timer(timeout, _kill) if timeout else None
    if watchdog:
        watchdog.daemon = True
        watchdog.start()

    lines = []
    try:
        for raw_line in process.stdout:
            line = raw_line.rstrip('\r\n')
            lines.append(line)
            if on_line:
                on_line(line)
        process.wait()
    finally:
        if watchdog:
            watchdog.cancel()
        process.stdout.close()

    result = ProcessResult(
        args=args,
        returncode=process.returncode,
        output='\n'.join(lines),
        timed_out=timed_out.is_set(),
    )

    if result.timed_out:
        logger.debug(f"{args[0]} killed after {timeout}s")
    else:
        logger.debug(f"{args[0]} exited with status {result.returncode}")

    return result
