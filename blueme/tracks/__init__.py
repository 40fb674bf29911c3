"""
Track models and discovery

Provides the Track value object, the per-track and per-batch result models,
and the functions that enumerate the tracks of a run from a directory or a
playlist file.
"""

from .models import (
    Track,
    TagSet,
    TransferStatus,
    StageStatus,
    ConversionResult,
    BatchResult,
)
from .discovery import discover_tracks, scan_directory, parse_xspf, parse_m3u

__all__ = [
    'Track',
    'TagSet',
    'TransferStatus',
    'StageStatus',
    'ConversionResult',
    'BatchResult',
    'discover_tracks',
    'scan_directory',
    'parse_xspf',
    'parse_m3u',
]
