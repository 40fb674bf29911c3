"""
Track discovery for blueme-converter

Produces the ordered list of source tracks for a run, either by scanning a
directory tree or by reading a playlist file.

Directory mode walks the tree recursively and keeps files whose extension is
in the allow-list. Subdirectories that cannot be read are skipped without
failing the scan, and siblings of a skipped directory are still visited.
Order is the filesystem enumeration order, it is not sorted.

Playlist mode reads XSPF (the format written by VLC, Clementine and
Strawberry) and, as a convenience, M3U/M3U8. Entries keep document order.
XSPF locations are ``file://`` URIs with percent-encoded absolute paths;
relative locations and M3U entries are resolved against the playlist's
directory.
"""

import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List, Optional, Union
from urllib.parse import unquote

from .models import Track
from ..utils.exceptions import PlaylistParseError
from ..utils.logger import get_logger


# Audio extensions picked up by a directory scan
AUDIO_EXTENSIONS = ('flac', 'oga', 'm4a', 'mp3', 'wma', 'aac', 'wav')

M3U_SUFFIXES = ('.m3u', '.m3u8')

FILE_URI_PREFIX = 'file://'

logger = get_logger(__name__)


def _normalize_extensions(extensions: Optional[Iterable[str]]) -> set:
    return {ext.lower().lstrip('.') for ext in (extensions or AUDIO_EXTENSIONS)}


def scan_directory(
    directory: Union[str, Path],
    extensions: Optional[Iterable[str]] = None
) -> List[Track]:
    """
    Recursively collect audio files below a directory

    Args:
        directory: Root directory to scan
        extensions: Allowed extensions without dot (defaults to AUDIO_EXTENSIONS)

    Returns:
        Tracks in filesystem enumeration order
    """
    allowed = _normalize_extensions(extensions)
    tracks = []

    def _skip_unreadable(error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    for dirpath, _dirnames, filenames in os.walk(directory, onerror=_skip_unreadable):
        for filename in filenames:
            file_path = Path(dirpath) / filename
            if file_path.suffix[1:].lower() not in allowed:
                continue
            if not file_path.is_file():
                continue
            tracks.append(Track.from_path(file_path))

    logger.debug(f"Scan of {directory} found {len(tracks)} tracks")
    return tracks


def location_to_path(location: str, uri: bool = False) -> Path:
    """
    Convert a playlist location entry to a filesystem path

    ``file://`` URIs are always percent-decoded. Other entries are decoded
    only when ``uri`` is set (XSPF locations are URI references); plain M3U
    paths are taken as written, so "50%20off.mp3" keeps its name.

    Args:
        location: "file:///music/a%20b.mp3" style URI or plain path
        uri: Treat a location without scheme as a relative URI reference

    Returns:
        Decoded path ("/music/a b.mp3")
    """
    location = location.strip()
    if location.startswith(FILE_URI_PREFIX):
        location = location[len(FILE_URI_PREFIX):]
        # file://localhost/music/... is equivalent to file:///music/...
        if location.startswith('localhost/'):
            location = location[len('localhost'):]
    elif not uri:
        return Path(location)
    return Path(unquote(location))


def _resolve_entry(playlist_path: Path, location: str, uri: bool = False) -> Path:
    """Playlist entry as a path, relative entries anchored at the playlist's directory"""
    path = location_to_path(location, uri=uri)
    if not path.is_absolute():
        path = playlist_path.parent / path
    return path


def _local_name(tag: str) -> str:
    """Strip the XML namespace from an element tag"""
    return tag.rsplit('}', 1)[-1]


def parse_xspf(playlist_path: Union[str, Path]) -> List[Track]:
    """
    Parse an XSPF playlist into tracks

    Args:
        playlist_path: Path to the .xspf document

    Returns:
        Tracks in document order

    Raises:
        PlaylistParseError: If the document is not well-formed XML
    """
    playlist_path = Path(playlist_path)
    try:
        root = ET.parse(str(playlist_path)).getroot()
    except ET.ParseError as e:
        raise PlaylistParseError(
            f"Unable to parse XML file \"{playlist_path}\": {e}",
            details={'file_path': str(playlist_path)}
        )
    except OSError as e:
        raise PlaylistParseError(
            f"Unable to read playlist \"{playlist_path}\": {e}",
            details={'file_path': str(playlist_path)}
        )

    tracks = []
    for track_list in (el for el in root if _local_name(el.tag) == 'trackList'):
        for item in (el for el in track_list if _local_name(el.tag) == 'track'):
            location = next(
                (el.text for el in item if _local_name(el.tag) == 'location' and el.text),
                None
            )
            if not location or not location.strip():
                logger.console_warning(f"Skipping playlist entry without location in {playlist_path}")
                continue
            tracks.append(Track.from_path(_resolve_entry(playlist_path, location, uri=True)))

    logger.debug(f"Playlist {playlist_path} lists {len(tracks)} tracks")
    return tracks


def parse_m3u(playlist_path: Union[str, Path]) -> List[Track]:
    """
    Parse an M3U/M3U8 playlist into tracks

    Relative entries are resolved against the playlist's directory.

    Args:
        playlist_path: Path to the .m3u/.m3u8 file

    Returns:
        Tracks in file order

    Raises:
        PlaylistParseError: If the file cannot be read as text
    """
    playlist_path = Path(playlist_path)
    try:
        with open(playlist_path, 'r', encoding='utf-8-sig') as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise PlaylistParseError(
            f"Unable to read playlist \"{playlist_path}\": {e}",
            details={'file_path': str(playlist_path)}
        )

    tracks = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith('#'):
            continue

        tracks.append(Track.from_path(_resolve_entry(playlist_path, entry)))

    return tracks


def discover_tracks(
    source: Union[str, Path],
    playlist: bool = False,
    extensions: Optional[Iterable[str]] = None
) -> List[Track]:
    """
    Enumerate the tracks of a run

    Args:
        source: Directory to scan, or playlist file when playlist=True
        playlist: Treat source as a playlist file
        extensions: Allow-list for directory scans

    Returns:
        Ordered list of tracks (may be empty)
    """
    if not playlist:
        return scan_directory(source, extensions)

    if Path(source).suffix.lower() in M3U_SUFFIXES:
        return parse_m3u(source)
    return parse_xspf(source)
