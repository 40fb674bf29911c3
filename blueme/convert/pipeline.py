"""
Conversion pipeline for blueme-converter

This module drives a batch of tracks through the per-track workflow:

    extract tags -> album-artist fallback -> canonical name
        -> convert or copy -> normalize -> write ID3v1 tags

Tracks are processed strictly one after another in discovery order; each
track is finished before the next one starts.

Decision Logic:

**Convert vs. copy:**
A source that is not MP3, or any source when ``force`` is set, goes through
the transcoder at the configured bitrate. An MP3 source is copied byte for
byte, its existing tags are replaced in the final stage anyway.

**Failure isolation:**
Each stage reports exactly one success or failure line per track. A failed
transcode skips normalization and tag writing for that track (there is no
file to work on); a failed normalization still lets the tags be written.
No stage failure, and no unexpected exception inside one track, stops the
batch. Only the startup checks done by the caller are fatal.

Collaborators:
The extractor, transcoder, normalizer and tag writer are passed in, so tests
and alternative back-ends can replace any of them. ``from_settings`` wires
the default mutagen / ffmpeg / mp3gain implementations.
"""

import shutil
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .naming import DEFAULT_MAX_LENGTH, build_output_path, resolve_canonical_name
from ..audio.metadata import MetadataExtractor, TagWriter, build_tag_fields
from ..audio.processor import Normalizer, Transcoder
from ..tracks.models import (
    BatchResult,
    ConversionResult,
    StageStatus,
    Track,
    TransferStatus,
    apply_albumartist_fallback,
)
from ..utils.helpers import ensure_directory
from ..utils.logger import create_operation_logger, get_logger


class ConversionPipeline:
    """
    Sequential per-track conversion for the Blue&Me MP3 set

    Attributes:
        extractor: Reads source tags (MetadataExtractor interface)
        transcoder: Converts to MP3 (Transcoder interface)
        normalizer: Adjusts loudness in place, None disables the stage
        tag_writer: Writes the ID3v1 record (TagWriter interface)
        force: Transcode MP3 sources too instead of copying them
        strip_charset: Strict character policy for names and tag values
        max_name_length: Tag-derived names must be shorter than this
        dry_run: Resolve and report names without writing anything
        show_progress: Draw a progress bar over the batch
    """

    def __init__(
        self,
        extractor: MetadataExtractor,
        transcoder: Transcoder,
        normalizer: Optional[Normalizer],
        tag_writer: TagWriter,
        force: bool = False,
        strip_charset: bool = True,
        max_name_length: int = DEFAULT_MAX_LENGTH,
        dry_run: bool = False,
        show_progress: bool = False
    ):
        self.extractor = extractor
        self.transcoder = transcoder
        self.normalizer = normalizer
        self.tag_writer = tag_writer
        self.force = force
        self.strip_charset = strip_charset
        self.max_name_length = max_name_length
        self.dry_run = dry_run
        self.show_progress = show_progress
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings, force: bool = False, dry_run: bool = False) -> 'ConversionPipeline':
        """
        Build a pipeline with the default back-ends

        Args:
            settings: Application Settings
            force: Transcode MP3 sources too
            dry_run: Report planned names only

        Returns:
            Configured ConversionPipeline
        """
        return cls(
            extractor=MetadataExtractor(),
            transcoder=Transcoder.from_settings(settings),
            normalizer=Normalizer.from_settings(settings) if settings.normalize.enabled else None,
            tag_writer=TagWriter.from_settings(settings),
            force=force,
            strip_charset=settings.naming.strict_charset,
            max_name_length=settings.naming.max_filename_length,
            dry_run=dry_run,
            show_progress=settings.logging.show_progress,
        )

    def _echo_output(self, line: str) -> None:
        """Forward one line of child process output to the console"""
        if line.strip():
            self.logger.console_info(line, raw=True)

    def needs_transcode(self, track: Track) -> bool:
        return self.force or not track.is_mp3

    def plan_track(self, track: Track, target: Union[str, Path]):
        """
        Resolve tags, name and output path for a track

        Args:
            track: Source track
            target: Output directory

        Returns:
            Tuple of (tags, name, output_path); tags include the album-artist fallback
        """
        tags = self.extractor.extract(track.path) or {}
        apply_albumartist_fallback(tags)

        name = resolve_canonical_name(
            track, tags,
            strip=self.strip_charset,
            max_length=self.max_name_length
        )
        return tags, name, build_output_path(target, name)

    def process_track(self, track: Track, target: Union[str, Path]) -> ConversionResult:
        """
        Run one track through every stage

        Args:
            track: Source track
            target: Output directory

        Returns:
            ConversionResult describing each stage; never raises for stage failures
        """
        tags, name, output_path = self.plan_track(track, target)
        result = ConversionResult(track=track, name=name, output_path=output_path)

        if self.dry_run:
            result.transfer = TransferStatus.CONVERTED if self.needs_transcode(track) else TransferStatus.COPIED
            action = "convert" if result.transfer == TransferStatus.CONVERTED else "copy"
            self.logger.console_info(f"Would {action} {track.filename} -> {output_path.name}")
            return result

        ensure_directory(target)

        # Stage 1: convert or copy
        if self.needs_transcode(track):
            process = self.transcoder.transcode(track.path, output_path, on_line=self._echo_output)
            if process.success:
                result.transfer = TransferStatus.CONVERTED
                self.logger.console_info(f"Converted {name}")
            else:
                result.error = f"transcode failed: {process.failure_reason}"
                self.logger.console_error(f"Error converting {name} ({process.failure_reason})")
        else:
            try:
                shutil.copyfile(track.path, output_path)
                result.transfer = TransferStatus.COPIED
                self.logger.console_info(f"Copied {name}")
            except OSError as e:
                result.error = f"copy failed: {e}"
                self.logger.console_error(f"Error copying {name} ({e})")

        if result.transfer == TransferStatus.FAILED:
            return result

        # Stage 2: loudness normalization
        if self.normalizer is None:
            self.logger.debug(f"Normalization disabled, skipping {name}")
        else:
            process = self.normalizer.normalize(output_path, on_line=self._echo_output)
            if process.success:
                result.normalize = StageStatus.OK
                self.logger.console_info(f"Normalized {name}")
            else:
                result.normalize = StageStatus.FAILED
                result.error = result.error or f"normalize failed: {process.failure_reason}"
                self.logger.console_error(f"Error normalizing {name} ({process.failure_reason})")

        # Stage 3: ID3v1 tags, every other tag format removed
        fields = build_tag_fields(tags, strip=self.strip_charset)
        if self.tag_writer.write_tags(output_path, fields):
            result.tags = StageStatus.OK
            self.logger.console_info(f"Wrote tags to {name}")
        else:
            result.tags = StageStatus.FAILED
            result.error = result.error or "tag write failed"
            self.logger.console_error(f"Error writing tags to {name}")

        return result

    def run(self, tracks: Sequence[Track], target: Union[str, Path]) -> BatchResult:
        """
        Process a batch of tracks in order

        Args:
            tracks: Tracks in discovery order
            target: Existing output directory

        Returns:
            BatchResult with one entry per track
        """
        batch = BatchResult(total=len(tracks), dry_run=self.dry_run)
        operation = create_operation_logger(__name__, "Conversion", show_progress=self.show_progress)
        operation.start(f"Will work with {len(tracks)} files.")

        written: List[Path] = []
        for index, track in enumerate(tracks, 1):
            try:
                result = self.process_track(track, target)
            except Exception as e:
                self.logger.console_error(f"Error processing {track.filename}: {e}")
                self.logger.debug(f"Unexpected failure for {track.path}", exc_info=e)
                result = ConversionResult(
                    track=track,
                    name=track.stem,
                    output_path=build_output_path(target, track.stem),
                    error=str(e),
                )

            if result.transfer != TransferStatus.FAILED:
                if result.output_path in written:
                    self.logger.console_warning(
                        f"{track.filename} has the same output name as an earlier track: {result.output_path.name}"
                    )
                written.append(result.output_path)

            batch.results.append(result)
            operation.progress(track.filename, index, len(tracks))

        if batch.success:
            operation.complete(batch.summary)
        else:
            operation.error(batch.summary)

        return batch
