"""
Metadata reading and ID3v1 tag writing for blueme-converter

The Blue&Me head unit only reads ID3v1 and tends to choke on files that
carry additional tag formats. This module therefore has two halves:

**MetadataExtractor** reads whatever tags the source file has (ID3v2,
Vorbis Comments, MP4 atoms, ASF attributes) through mutagen and maps them
onto the small TagSet vocabulary used by the pipeline:

- title, album, artist, albumartist, year, comment, track

Keys absent from the source are absent from the TagSet. A file mutagen
cannot read, or one without tags, yields an empty TagSet rather than an
error.

**TagWriter** replaces every tag on an output MP3 with a single ID3v1.1
record holding six fields (TITLE, ARTIST, ALBUM, YEAR, COMMENT, TRACK):

1. any APEv2 tag (written by mp3gain and some rippers) is removed
2. a fresh ID3 tag is built and saved with ID3v1 creation enabled
3. the ID3v2 header mutagen wrote alongside is stripped again

Text Encoding:
ID3v1 is Latin-1 by definition and mutagen encodes it that way, replacing
unmappable characters with "?". The ``ascii`` encoding folds accented
characters to plain ASCII first ("Beyoncé" -> "Beyonce").
"""

import re
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import mutagen
from mutagen.apev2 import delete as delete_apev2
from mutagen.id3 import (
    COMM, ID3, TALB, TDRC, TIT2, TPE1, TRCK,
    Encoding, ID3v1SaveOptions,
)
from mutagen.id3 import delete as delete_id3

from ..tracks.models import ID3V1_FIELDS, TAG_KEYS, TagSet
from ..utils.helpers import fold_to_ascii, normalize_string
from ..utils.logger import get_logger


# Source keys per TagSet field, across ID3v2 / Vorbis / MP4 / ASF.
# Keys ending in ':' match by prefix (ID3 comment frames carry desc/lang).
TAG_SOURCES: Dict[str, Sequence[str]] = {
    'title': ('title', 'TIT2', '\xa9nam', 'Title'),
    'album': ('album', 'TALB', '\xa9alb', 'WM/AlbumTitle'),
    'artist': ('artist', 'TPE1', '\xa9ART', 'Author'),
    'albumartist': ('albumartist', 'album artist', 'TPE2', 'aART', 'WM/AlbumArtist'),
    'year': ('date', 'year', 'TDRC', 'TYER', '\xa9day', 'WM/Year'),
    'comment': ('comment', 'description', 'COMM::', '\xa9cmt', 'Description'),
    'track': ('tracknumber', 'TRCK', 'trkn', 'WM/TrackNumber'),
}

_YEAR_PATTERN = re.compile(r'\d{4}')


def _stringify(value) -> str:
    """Flatten a mutagen tag value to text"""
    if isinstance(value, list):
        value = value[0] if value else ''
    if hasattr(value, 'text'):
        # ID3 text frames hold a list of strings
        value = value.text[0] if value.text else ''
    if isinstance(value, tuple):
        # MP4 trkn/disk atoms are (number, total)
        value = value[0] if value else ''
    return str(value).strip()


def _lookup(audio, key: str):
    if key.endswith(':'):
        for existing in sorted(audio.keys()):
            if existing.startswith(key):
                return audio[existing]
        return None
    try:
        return audio[key]
    except (KeyError, ValueError):
        return None


class MetadataExtractor:
    """Reads source tags into a TagSet"""

    def __init__(self):
        self.logger = get_logger(__name__)

    def extract(self, file_path: Union[str, Path]) -> TagSet:
        """
        Read tags from an audio file

        Args:
            file_path: Source audio file

        Returns:
            TagSet with only the keys the file actually has; empty on any failure
        """
        try:
            audio = mutagen.File(str(file_path))
        except Exception as e:
            # mutagen raises a wide range of errors for damaged files
            self.logger.debug(f"Cannot read tags from {file_path}: {e}")
            return {}

        if audio is None or not audio.keys():
            self.logger.debug(f"No tags found in {file_path}")
            return {}

        tags: TagSet = {}
        for field_name in TAG_KEYS:
            for key in TAG_SOURCES[field_name]:
                value = _lookup(audio, key)
                if value is None:
                    continue
                text = _stringify(value)
                if text:
                    tags[field_name] = text
                    break

        self.logger.debug(f"Extracted {sorted(tags)} from {Path(file_path).name}")
        return tags


def build_tag_fields(tags: TagSet, strip: bool = True) -> Dict[str, str]:
    """
    Reduce a TagSet to the six ID3v1 fields

    Every field is normalized and defaults to "". ARTIST is taken from
    albumartist (populated from artist by the fallback rule), YEAR is cut
    to its four-digit year and TRACK to the number before any "/total".

    Args:
        tags: TagSet after the album-artist fallback
        strip: Apply the strict character set

    Returns:
        Mapping with exactly the keys in ID3V1_FIELDS
    """
    fields = {name: '' for name in ID3V1_FIELDS}

    fields['title'] = normalize_string(tags.get('title', ''), strip=strip)
    fields['artist'] = normalize_string(tags.get('albumartist', ''), strip=strip)
    fields['album'] = normalize_string(tags.get('album', ''), strip=strip)
    fields['comment'] = normalize_string(tags.get('comment', ''), strip=strip)

    year = _YEAR_PATTERN.search(tags.get('year', ''))
    if year:
        fields['year'] = year.group(0)

    track = tags.get('track', '').split('/')[0].strip()
    if track.isdigit():
        fields['track'] = str(int(track))

    return fields


class TagWriter:
    """
    Writes a minimal ID3v1 record and removes every other tag format

    Attributes:
        encoding: "iso-8859-1" (default) or "ascii"
    """

    def __init__(self, encoding: str = "iso-8859-1"):
        self.encoding = encoding.lower()
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings) -> 'TagWriter':
        return cls(encoding=settings.metadata.encoding)

    def _encode_text(self, text: str) -> str:
        if self.encoding == 'ascii':
            return fold_to_ascii(text)
        return text

    def write_tags(self, file_path: Union[str, Path], fields: Dict[str, str]) -> bool:
        """
        Replace all tags on an MP3 with a single ID3v1 record

        Args:
            file_path: Output MP3 file
            fields: Six-field mapping from build_tag_fields

        Returns:
            True if the tag was written and other formats removed
        """
        path = str(file_path)
        values = {name: self._encode_text(fields.get(name, '')) for name in ID3V1_FIELDS}

        try:
            delete_apev2(path)

            tags = ID3()
            if values['title']:
                tags.add(TIT2(encoding=Encoding.UTF8, text=values['title']))
            if values['artist']:
                tags.add(TPE1(encoding=Encoding.UTF8, text=values['artist']))
            if values['album']:
                tags.add(TALB(encoding=Encoding.UTF8, text=values['album']))
            if values['year']:
                tags.add(TDRC(encoding=Encoding.UTF8, text=values['year']))
            if values['track']:
                tags.add(TRCK(encoding=Encoding.UTF8, text=values['track']))
            if values['comment']:
                # ID3v1 conversion looks the comment up by its bare frame ID
                tags['COMM'] = COMM(encoding=Encoding.UTF8, lang='eng', desc='', text=values['comment'])

            tags.save(path, v1=ID3v1SaveOptions.CREATE, v2_version=4)
            delete_id3(path, delete_v1=False, delete_v2=True)

        except Exception as e:
            self.logger.debug(f"Failed to write ID3v1 tags to {path}: {e}")
            return False

        self.logger.debug(f"ID3v1 tags written: {Path(path).name}")
        return True


def read_id3v1(file_path: Union[str, Path]) -> Optional[Dict[str, str]]:
    """
    Read the raw ID3v1 record at the end of a file

    Used by the inspect command to show what the head unit will see.

    Args:
        file_path: MP3 file

    Returns:
        Six-field mapping, or None when the file has no ID3v1 tag
    """
    with open(file_path, 'rb') as f:
        f.seek(0, 2)
        if f.tell() < 128:
            return None
        f.seek(-128, 2)
        data = f.read(128)

    if data[:3] != b'TAG':
        return None

    def _text(raw: bytes) -> str:
        return raw.split(b'\x00', 1)[0].decode('latin-1').rstrip()

    has_track = data[125] == 0 and data[126] != 0
    return {
        'title': _text(data[3:33]),
        'artist': _text(data[33:63]),
        'album': _text(data[63:93]),
        'year': _text(data[93:97]),
        'comment': _text(data[97:125] if has_track else data[97:127]),
        'track': str(data[126]) if has_track else '',
    }
