"""
Input validation utilities
"""
import shutil
from pathlib import Path
from typing import Optional, Tuple, Union

from .exceptions import ExternalToolError, SourceNotFoundError, TargetNotFoundError


PLAYLIST_SUFFIXES = ('.xspf', '.m3u', '.m3u8')


def validate_target_directory(path: Union[str, Path]) -> Tuple[bool, Optional[str]]:
    """
    Validate the output directory

    The target is never created: a missing directory usually means the
    USB stick is not mounted.

    Args:
        path: Directory path to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not str(path).strip():
        return False, "Target directory cannot be empty"

    target = Path(path).expanduser()
    if not target.exists():
        return False, f"{target} does not exist"
    if not target.is_dir():
        return False, f"{target} is not a directory"

    return True, None


def validate_source(path: Union[str, Path], playlist: bool = False) -> Tuple[bool, Optional[str]]:
    """
    Validate the conversion source

    Args:
        path: Source directory, or playlist file when playlist is True
        playlist: Source is a playlist file

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not str(path).strip():
        return False, "Source cannot be empty"

    source = Path(path).expanduser()
    if not source.exists():
        return False, f"{source} does not exist"

    if playlist:
        if not source.is_file():
            return False, f"{source} is not a playlist file"
        if source.suffix.lower() not in PLAYLIST_SUFFIXES:
            return False, f"Unsupported playlist type: {source.suffix or source.name}"
    elif not source.is_dir():
        return False, f"{source} is not a directory"

    return True, None


def validate_bitrate(bitrate: str) -> Tuple[bool, Optional[str]]:
    """Check an ffmpeg style bitrate such as "320k" """
    value = str(bitrate).strip()
    digits = value[:-1] if value[-1:].lower() == 'k' else value
    if not digits.isdigit() or int(digits) <= 0:
        return False, f"Invalid bitrate: {bitrate}"
    return True, None


def require_target_directory(path: Union[str, Path]) -> Path:
    """
    Return the target directory or raise

    Raises:
        TargetNotFoundError: If the directory is missing or not a directory
    """
    is_valid, error_msg = validate_target_directory(path)
    if not is_valid:
        raise TargetNotFoundError(
            f"Invalid target directory: {error_msg}",
            details={'path': str(path)}
        )
    return Path(path).expanduser()


def require_source(path: Union[str, Path], playlist: bool = False) -> Path:
    """
    Return the source path or raise

    Raises:
        SourceNotFoundError: If the directory or playlist file is unusable
    """
    is_valid, error_msg = validate_source(path, playlist=playlist)
    if not is_valid:
        raise SourceNotFoundError(
            f"Invalid source: {error_msg}",
            details={'path': str(path), 'playlist': playlist}
        )
    return Path(path).expanduser()


def locate_tool(binary: str) -> Path:
    """
    Resolve an external binary on PATH

    Args:
        binary: Executable name or path (ffmpeg, mp3gain)

    Returns:
        Absolute path of the executable

    Raises:
        ExternalToolError: If the binary cannot be found or is not executable
    """
    location = shutil.which(binary)
    if not location:
        raise ExternalToolError(
            f"{binary} not found on PATH",
            details={'binary': binary}
        )
    return Path(location)
