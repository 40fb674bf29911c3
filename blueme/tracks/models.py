"""
Data models for blueme-converter

This module defines the transient data structures that flow through one
conversion run. Nothing here is persisted: every object lives for the
duration of a single invocation.

Model Layers:

1. **Status Enums**: Outcome of each pipeline stage for one track
2. **Track**: Immutable reference to one source audio file
3. **TagSet helpers**: Tag vocabulary and the album-artist fallback rule
4. **Results**: Per-track ConversionResult and the batch-level BatchResult

TagSet Representation:

A TagSet is a plain ``Dict[str, str]`` restricted to the keys in
``TAG_KEYS``. Keys missing from the source file are missing from the mapping;
the extractor never inserts empty placeholders. ``apply_albumartist_fallback``
is the only sanctioned mutation and must run before the mapping is used for
naming or tag writing.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union


# Tag vocabulary understood by the pipeline
TAG_KEYS = ('title', 'album', 'artist', 'albumartist', 'year', 'comment', 'track')

# The six ID3v1 fields, in the order they are written
ID3V1_FIELDS = ('title', 'artist', 'album', 'year', 'comment', 'track')

TagSet = Dict[str, str]


class TransferStatus(Enum):
    """
    How the output file was produced

    Values:
        CONVERTED: Transcoded to MP3 by the external transcoder
        COPIED: Source was already MP3 and was copied byte for byte
        FAILED: No usable output file was produced
    """
    CONVERTED = "converted"
    COPIED = "copied"
    FAILED = "failed"


class StageStatus(Enum):
    """
    Outcome of the normalize and tag-write stages

    Values:
        OK: Stage completed successfully
        FAILED: Stage ran and failed (or timed out)
        SKIPPED: Stage did not run (disabled, dry run, or no output file)
    """
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Track:
    """
    Reference to one source audio file

    Attributes:
        path: Absolute path to the source file
        extension: Lower-case extension without the dot ("flac", "mp3")
        stem: File name without extension, used as the fallback output name
    """
    path: Path
    extension: str
    stem: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'Track':
        """
        Build a Track from a file path

        Args:
            path: Path to the audio file (made absolute, not resolved)

        Returns:
            Track instance
        """
        path_obj = Path(path).expanduser().absolute()
        return cls(
            path=path_obj,
            extension=path_obj.suffix[1:].lower(),
            stem=path_obj.stem,
        )

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def is_mp3(self) -> bool:
        return self.extension == 'mp3'

    def __str__(self) -> str:
        return str(self.path)


def apply_albumartist_fallback(tags: TagSet) -> TagSet:
    """
    Populate albumartist from artist when it is missing or empty

    The substitution is written back into the given mapping so file naming
    and tag writing both see the same artist.

    Args:
        tags: TagSet to update in place

    Returns:
        The same mapping, for chaining
    """
    if not tags.get('albumartist') and tags.get('artist'):
        tags['albumartist'] = tags['artist']
    return tags


def resolved_artist(tags: TagSet) -> str:
    """Artist used for naming and the ID3v1 ARTIST field"""
    return tags.get('albumartist') or tags.get('artist') or ''


@dataclass
class ConversionResult:
    """
    Outcome of processing one track

    Attributes:
        track: Source track
        name: Canonical output name (without extension)
        output_path: Final output file location
        transfer: Convert / copy outcome
        normalize: Loudness normalization outcome
        tags: ID3v1 tag write outcome
        error: Description of the first failure, if any

    A track counts as successful when an output file was produced and its
    tags were written; a failed normalization is reported but does not fail
    the track.
    """
    track: Track
    name: str
    output_path: Path
    transfer: TransferStatus = TransferStatus.FAILED
    normalize: StageStatus = StageStatus.SKIPPED
    tags: StageStatus = StageStatus.SKIPPED
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.transfer != TransferStatus.FAILED and self.tags == StageStatus.OK


@dataclass
class BatchResult:
    """
    Aggregated outcome of a conversion run

    Attributes:
        total: Number of tracks discovered
        results: Per-track results in processing order
        dry_run: True when nothing was written
    """
    total: int
    results: List[ConversionResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def processed(self) -> int:
        """Number of tracks that were converted/copied and tagged"""
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> List[ConversionResult]:
        if self.dry_run:
            return []
        return [result for result in self.results if not result.success]

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def summary(self) -> str:
        """
        Human-readable summary line

        Returns:
            e.g. "Processed 2 of 3 files (1 failed)"
        """
        if self.dry_run:
            return f"Dry run: {len(self.results)} of {self.total} files would be written"

        text = f"Processed {self.processed} of {self.total} files"
        failed = len(self.failed)
        if failed:
            text += f" ({failed} failed)"
        return text
