"""
Audio processing package for blueme-converter

Package Architecture:

1. **Process Module (process.py)**:
   - Runs external programs with streamed output and a timeout watchdog

2. **Processor Module (processor.py)**:
   - `Transcoder`: ffmpeg based conversion to constant bitrate MP3
   - `Normalizer`: mp3gain based lossless loudness normalization

3. **Metadata Module (metadata.py)**:
   - `MetadataExtractor`: reads ID3v2, Vorbis, MP4 and ASF tags via mutagen
   - `TagWriter`: leaves a single ID3v1.1 tag on the output file
"""

from .process import ProcessResult, run_streaming
from .processor import Transcoder, Normalizer
from .metadata import MetadataExtractor, TagWriter, build_tag_fields, read_id3v1

__all__ = [
    'ProcessResult',
    'run_streaming',
    'Transcoder',
    'Normalizer',
    'MetadataExtractor',
    'TagWriter',
    'build_tag_fields',
    'read_id3v1',
]
