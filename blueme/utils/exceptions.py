"""
Exception classes for blueme-converter.

Exception Hierarchy:
    BluemeError (base)
        ConfigError - Configuration file or value issues
        SourceNotFoundError - Input directory / playlist file missing
        TargetNotFoundError - Output directory missing
        PlaylistParseError - Playlist document cannot be parsed
        ExternalToolError - ffmpeg / mp3gain could not be run

Everything in this hierarchy except ExternalToolError is fatal: it is raised
before the first track is processed and stops the run. Per-track failures
are never raised out of the pipeline, they are reported on the result object.
"""

from typing import Any, Dict, Optional


class BluemeError(Exception):
    """
    Base exception for all blueme-converter errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (paths, exit codes).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(BluemeError):
    """
    Raised when the configuration file is unreadable or holds invalid values.

    Example:
        raise ConfigError(
            "Unsupported ID3v1 tag encoding: utf-8",
            details={'field': 'metadata.encoding'}
        )
    """
    pass


class SourceNotFoundError(BluemeError):
    """Raised when the input directory (scan mode) or playlist file does not exist."""
    pass


class TargetNotFoundError(BluemeError):
    """Raised when the output directory does not exist. It is never created implicitly."""
    pass


class PlaylistParseError(BluemeError):
    """
    Raised when a playlist document is not well-formed.

    Common causes:
        - XSPF file is not valid XML
        - File is not readable as text
    """
    pass


class ExternalToolError(BluemeError):
    """
    Raised when an external binary (ffmpeg, mp3gain) cannot be started.

    Only used by the doctor command; the pipeline reports the same condition
    as a failed stage for the current track.
    """
    pass
