"""
Output file naming for blueme-converter

The Blue&Me unit browses by file name only, so every output file is named
"Title - Artist - Album" when the tags allow it and falls back to the
source file name otherwise.

Resolution order (changing it changes observable output names):
1. default to the source file name without extension
2. compose "{title} - {artist} - {album}" when all three are present
3. normalize the composed candidate
4. keep it only when non-empty and its UTF-8 encoding is shorter than
   the length cap, otherwise use the normalized default
5. replace path separators so the name is a single path component
"""

from pathlib import Path
from typing import Union

from ..tracks.models import TagSet, Track, resolved_artist
from ..utils.helpers import UNKNOWN_NAME, normalize_string, replace_path_separators


DEFAULT_MAX_LENGTH = 200

OUTPUT_EXTENSION = '.mp3'


def compose_tag_name(tags: TagSet) -> str:
    """
    Build the raw "Title - Artist - Album" string

    Args:
        tags: TagSet after the album-artist fallback

    Returns:
        Composed name, or "" when title, artist or album is missing
    """
    title = tags.get('title', '')
    album = tags.get('album', '')
    artist = resolved_artist(tags)

    if not (title and artist and album):
        return ''

    return f"{title} - {artist} - {album}"


def resolve_canonical_name(
    track: Track,
    tags: TagSet,
    strip: bool = True,
    max_length: int = DEFAULT_MAX_LENGTH
) -> str:
    """
    Derive the output name of a track

    Args:
        track: Source track
        tags: Extracted tags (possibly empty)
        strip: Apply the strict character set when normalizing
        max_length: Candidate names must encode to fewer UTF-8 bytes than this

    Returns:
        Non-empty name without extension, free of path separators
    """
    name = track.stem

    candidate = normalize_string(compose_tag_name(tags), strip=strip)
    if candidate and len(candidate.encode('utf-8')) < max_length:
        name = candidate
    else:
        name = normalize_string(name, strip=strip)

    if not name.strip():
        name = UNKNOWN_NAME

    return replace_path_separators(name)


def build_output_path(target: Union[str, Path], name: str) -> Path:
    """Output file location for a canonical name"""
    return Path(target) / f"{name}{OUTPUT_EXTENSION}"
