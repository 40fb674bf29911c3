"""Test track models and output naming"""

from pathlib import Path

from blueme.convert.naming import (
    build_output_path,
    compose_tag_name,
    resolve_canonical_name,
)
from blueme.tracks.models import (
    BatchResult,
    ConversionResult,
    StageStatus,
    Track,
    TransferStatus,
    apply_albumartist_fallback,
)
from blueme.utils.helpers import PATH_SEPARATOR_SUBSTITUTE


FULL_TAGS = {'title': 'Song', 'artist': 'Band', 'album': 'Album'}


class TestTrack:
    """Test Track construction"""

    def test_from_path(self, temp_dir):
        track = Track.from_path(temp_dir / "Artist" / "01 Intro.FLAC")
        assert track.extension == "flac"
        assert track.stem == "01 Intro"
        assert track.filename == "01 Intro.FLAC"
        assert track.path.is_absolute()
        assert not track.is_mp3

    def test_is_mp3(self):
        assert Track.from_path("/music/a.Mp3").is_mp3


class TestAlbumArtistFallback:

    def test_copies_artist_when_missing(self):
        tags = {'artist': 'Band'}
        assert apply_albumartist_fallback(tags) is tags
        assert tags['albumartist'] == 'Band'

    def test_copies_artist_when_empty(self):
        tags = apply_albumartist_fallback({'artist': 'Band', 'albumartist': ''})
        assert tags['albumartist'] == 'Band'

    def test_keeps_existing_albumartist(self):
        tags = apply_albumartist_fallback({'artist': 'Singer', 'albumartist': 'Various'})
        assert tags['albumartist'] == 'Various'

    def test_no_artist_at_all(self):
        assert apply_albumartist_fallback({'title': 'x'}) == {'title': 'x'}


class TestCanonicalName:
    """Test output name resolution"""

    def test_name_from_tags(self):
        track = Track.from_path("/music/01 - track.flac")
        tags = apply_albumartist_fallback(dict(FULL_TAGS))
        assert resolve_canonical_name(track, tags) == "Song - Band - Album"

    def test_albumartist_preferred(self):
        track = Track.from_path("/music/x.flac")
        tags = {'title': 'Song', 'artist': 'Singer', 'albumartist': 'Various', 'album': 'Hits'}
        assert compose_tag_name(tags) == "Song - Various - Hits"
        assert resolve_canonical_name(track, tags) == "Song - Various - Hits"

    def test_missing_tag_falls_back_to_file_name(self):
        track = Track.from_path("/music/01 - track.flac")
        tags = {'title': 'Song', 'artist': 'Band'}
        assert compose_tag_name(tags) == ""
        assert resolve_canonical_name(track, tags) == "01 - track"

    def test_no_tags(self):
        track = Track.from_path("/music/Intro (Live).ogg")
        assert resolve_canonical_name(track, {}) == "Intro (Live)"

    def test_fallback_name_is_normalized(self):
        track = Track.from_path("/music/Café? Noir!.flac")
        assert resolve_canonical_name(track, {}) == "Caf Noir"

    def test_overlong_candidate_falls_back(self):
        track = Track.from_path("/music/short.flac")
        tags = {'title': 'T' * 190, 'albumartist': 'Band', 'album': 'Album'}
        assert resolve_canonical_name(track, tags) == "short"
        assert resolve_canonical_name(track, tags, max_length=500).startswith("TTT")

    def test_length_cap_counts_bytes(self):
        track = Track.from_path("/music/short.flac")
        tags = {'title': '日' * 90, 'artist': 'Band', 'album': 'Album'}

        # 106 characters but 282 bytes
        assert resolve_canonical_name(track, tags, strip=False) == "short"

        name = resolve_canonical_name(track, {**tags, 'title': '日' * 50}, strip=False)
        assert name == '日' * 50 + " - Band - Album"
        assert len(f"{name}.mp3".encode("utf-8")) <= 255

    def test_name_that_normalizes_to_nothing(self):
        track = Track.from_path("/music/???.flac")
        assert resolve_canonical_name(track, {}) == "unknown"

    def test_name_is_single_path_component(self):
        track = Track.from_path("/music/x.flac")
        tags = {'title': 'AC/DC Live', 'albumartist': 'AC/DC', 'album': 'Live'}
        name = resolve_canonical_name(track, tags, strip=False)
        assert "/" not in name
        assert name == f"AC{PATH_SEPARATOR_SUBSTITUTE}DC Live - AC{PATH_SEPARATOR_SUBSTITUTE}DC - Live"

    def test_entities_decoded(self):
        track = Track.from_path("/music/x.flac")
        tags = {'title': 'Rock &amp; Roll', 'albumartist': 'Band', 'album': 'Album'}
        assert resolve_canonical_name(track, tags, strip=False) == "Rock & Roll - Band - Album"

    def test_build_output_path(self, temp_dir):
        assert build_output_path(temp_dir, "Song - Band - Album") == temp_dir / "Song - Band - Album.mp3"


class TestBatchResult:
    """Test batch summaries"""

    def _result(self, name, transfer, tags):
        track = Track.from_path(f"/music/{name}.flac")
        return ConversionResult(
            track=track, name=name, output_path=Path(f"/usb/{name}.mp3"),
            transfer=transfer, tags=tags
        )

    def test_summary_counts_failures(self):
        batch = BatchResult(total=3, results=[
            self._result("a", TransferStatus.CONVERTED, StageStatus.OK),
            self._result("b", TransferStatus.FAILED, StageStatus.SKIPPED),
            self._result("c", TransferStatus.COPIED, StageStatus.OK),
        ])
        assert batch.processed == 2
        assert len(batch.failed) == 1
        assert not batch.success
        assert batch.summary == "Processed 2 of 3 files (1 failed)"

    def test_tag_failure_fails_track(self):
        result = self._result("a", TransferStatus.CONVERTED, StageStatus.FAILED)
        assert not result.success

    def test_summary_all_ok(self):
        batch = BatchResult(total=1, results=[self._result("a", TransferStatus.COPIED, StageStatus.OK)])
        assert batch.success
        assert batch.summary == "Processed 1 of 1 files"

    def test_dry_run_has_no_failures(self):
        batch = BatchResult(total=2, dry_run=True, results=[
            self._result("a", TransferStatus.CONVERTED, StageStatus.SKIPPED),
            self._result("b", TransferStatus.COPIED, StageStatus.SKIPPED),
        ])
        assert batch.success
        assert batch.summary == "Dry run: 2 of 2 files would be written"
