"""Test tag extraction and ID3v1 writing"""

import pytest
from mutagen.apev2 import APEv2, APENoHeaderError
from mutagen.id3 import COMM, ID3, TIT2, TPE1

from blueme.audio import metadata
from blueme.audio.metadata import (
    MetadataExtractor,
    TagWriter,
    build_tag_fields,
    read_id3v1,
)


FIELDS = {
    'title': 'Song',
    'artist': 'Band',
    'album': 'Album',
    'year': '2001',
    'comment': 'ripped',
    'track': '3',
}


class TestMetadataExtractor:
    """Test source tag extraction"""

    def _extract(self, monkeypatch, audio):
        monkeypatch.setattr(metadata.mutagen, "File", lambda path: audio)
        return MetadataExtractor().extract("/music/song.flac")

    def test_vorbis_comments(self, monkeypatch):
        tags = self._extract(monkeypatch, {
            'title': ['Song'],
            'artist': ['Band'],
            'album': ['Album'],
            'date': ['2001-05-02'],
            'tracknumber': ['3/12'],
        })
        assert tags == {
            'title': 'Song',
            'artist': 'Band',
            'album': 'Album',
            'year': '2001-05-02',
            'track': '3/12',
        }

    def test_only_present_keys(self, monkeypatch):
        tags = self._extract(monkeypatch, {'title': ['Song'], 'artist': ['']})
        assert tags == {'title': 'Song'}

    def test_mp4_atoms(self, monkeypatch):
        tags = self._extract(monkeypatch, {
            '\xa9nam': ['Song'],
            'aART': ['Various'],
            'trkn': [(7, 12)],
        })
        assert tags == {'title': 'Song', 'albumartist': 'Various', 'track': '7'}

    def test_id3_frames(self, monkeypatch):
        tags = self._extract(monkeypatch, {
            'TIT2': TIT2(encoding=3, text=['Song']),
            'TPE1': TPE1(encoding=3, text=['Band']),
            'COMM::eng': COMM(encoding=3, lang='eng', desc='', text=['nice']),
        })
        assert tags == {'title': 'Song', 'artist': 'Band', 'comment': 'nice'}

    def test_unreadable_file(self, monkeypatch):
        assert self._extract(monkeypatch, None) == {}

    def test_reader_error(self, monkeypatch):
        def broken(path):
            raise ValueError("corrupt header")

        monkeypatch.setattr(metadata.mutagen, "File", broken)
        assert MetadataExtractor().extract("/music/broken.flac") == {}


class TestBuildTagFields:
    """Test reduction to the six ID3v1 fields"""

    def test_all_fields(self):
        fields = build_tag_fields({
            'title': 'Song!',
            'artist': 'Singer',
            'albumartist': 'Band',
            'album': 'Album',
            'year': '2001-05-02',
            'comment': 'ripped',
            'track': '03/12',
        })
        assert fields == {
            'title': 'Song',
            'artist': 'Band',
            'album': 'Album',
            'year': '2001',
            'comment': 'ripped',
            'track': '3',
        }

    def test_missing_fields_are_empty(self):
        fields = build_tag_fields({})
        assert set(fields) == set(FIELDS)
        assert all(value == '' for value in fields.values())

    def test_invalid_track_and_year(self):
        fields = build_tag_fields({'track': 'A1', 'year': 'unknown'})
        assert fields['track'] == ''
        assert fields['year'] == ''

    def test_lenient_policy_keeps_characters(self):
        fields = build_tag_fields({'title': 'Café &amp; Bar'}, strip=False)
        assert fields['title'] == 'Café & Bar'


class TestTagWriter:
    """Test ID3v1-only tag writing on a synthetic MP3"""

    def test_writes_only_id3v1(self, mp3_file):
        original_size = mp3_file.stat().st_size

        assert TagWriter().write_tags(mp3_file, FIELDS)

        data = mp3_file.read_bytes()
        assert not data.startswith(b"ID3")
        assert data[-128:-125] == b"TAG"
        assert len(data) == original_size + 128
        assert read_id3v1(mp3_file) == FIELDS

    def test_replaces_existing_tags(self, mp3_file):
        id3 = ID3()
        id3.add(TIT2(encoding=3, text=['Old title']))
        id3.save(str(mp3_file))

        ape = APEv2()
        ape['Title'] = 'Old title'
        ape['REPLAYGAIN_TRACK_GAIN'] = '-3.2 dB'
        ape.save(str(mp3_file))

        assert TagWriter().write_tags(mp3_file, FIELDS)

        assert not mp3_file.read_bytes().startswith(b"ID3")
        with pytest.raises(APENoHeaderError):
            APEv2(str(mp3_file))
        assert read_id3v1(mp3_file)['title'] == 'Song'

    def test_rewriting_keeps_single_record(self, mp3_file):
        writer = TagWriter()
        assert writer.write_tags(mp3_file, FIELDS)
        size = mp3_file.stat().st_size

        assert writer.write_tags(mp3_file, dict(FIELDS, title='Other'))
        assert mp3_file.stat().st_size == size
        assert read_id3v1(mp3_file)['title'] == 'Other'

    def test_empty_fields(self, mp3_file):
        assert TagWriter().write_tags(mp3_file, {})
        tag = read_id3v1(mp3_file)
        assert tag['title'] == ''
        assert tag['track'] == ''

    def test_latin1_and_ascii_encodings(self, mp3_file):
        assert TagWriter().write_tags(mp3_file, dict(FIELDS, artist='Beyoncé'))
        assert read_id3v1(mp3_file)['artist'] == 'Beyoncé'

        assert TagWriter(encoding='ascii').write_tags(mp3_file, dict(FIELDS, artist='Beyoncé'))
        assert read_id3v1(mp3_file)['artist'] == 'Beyonce'

    def test_long_values_truncated(self, mp3_file):
        assert TagWriter().write_tags(mp3_file, dict(FIELDS, title='x' * 40, comment='c' * 40))
        tag = read_id3v1(mp3_file)
        assert tag['title'] == 'x' * 30
        assert tag['comment'] == 'c' * 28

    def test_missing_file_reports_failure(self, temp_dir):
        assert not TagWriter().write_tags(temp_dir / "missing.mp3", FIELDS)

    def test_read_id3v1_without_tag(self, mp3_file):
        assert read_id3v1(mp3_file) is None
