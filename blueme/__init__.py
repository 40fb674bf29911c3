"""
blueme-converter: Prepare music for the Fiat Blue&Me car radio

The Blue&Me head unit plays MP3 files from a USB stick but is picky about
them: it reads ID3v1 tags only, can stumble over ID3v2/APEv2 blocks, browses
by file name and has no loudness adjustment of its own. This package turns a
music collection (or a playlist) into a flat directory of files it handles
well.

## Core Architecture

**Track Discovery (`blueme/tracks/`)**
- Recursive directory scan with an extension allow-list
- XSPF and M3U playlist parsing
- Track, per-stage status and batch result models

**Audio Processing (`blueme/audio/`)**
- Streaming external process runner with timeouts
- ffmpeg transcoder and mp3gain normalizer adapters
- Tag extraction via mutagen and ID3v1-only tag writing

**Conversion (`blueme/convert/`)**
- Canonical "Title - Artist - Album" output naming
- Sequential per-track pipeline with failure isolation

**Configuration and Utilities (`blueme/config/`, `blueme/utils/`)**
- YAML and environment based settings
- Colored console logging with optional rotating log file
- Name normalization, startup validation, exception hierarchy

## Usage

    blueme convert ~/Music /media/usb
    blueme convert --xspf party.xspf /media/usb
    blueme doctor
"""

__version__ = "1.0.0"

__author__ = "blueme-converter contributors"

__description__ = "Convert audio files to normalized, ID3v1-tagged MP3s for Fiat Blue&Me"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
