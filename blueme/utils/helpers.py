"""
Utility functions and helpers for blueme-converter
Common functions for filename sanitizing, path handling and formatting
"""

import html
import os
import re
import unicodedata
from pathlib import Path
from typing import Union


# Characters the Blue&Me head unit displays reliably
_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9'\-_() ]")

# Look-alike used in place of directory separators (U+2215 DIVISION SLASH)
PATH_SEPARATOR_SUBSTITUTE = "∕"

# Fallback for names that sanitize to nothing
UNKNOWN_NAME = "unknown"


def normalize_string(text: str, strip: bool = True) -> str:
    """
    Normalize arbitrary tag text into a safe filename/tag fragment

    Tag readers commonly hand back HTML entities for special characters
    ("AC&#47;DC", "Simon &amp; Garfunkel"). Entities are decoded until the
    text stops changing, then, with the strict policy, every character
    outside letters, digits, apostrophe, hyphen, underscore, parentheses
    and space is removed.

    Args:
        text: Raw text, None is treated as empty
        strip: Apply the strict character set (False only decodes entities)

    Returns:
        Normalized text; normalize_string(normalize_string(s)) == normalize_string(s)
    """
    if not text:
        return ""

    decoded = str(text)
    while True:
        unescaped = html.unescape(decoded)
        if unescaped == decoded:
            break
        decoded = unescaped

    if strip:
        decoded = _DISALLOWED_CHARS.sub('', decoded)

    return decoded


def replace_path_separators(name: str) -> str:
    """
    Replace directory separators so the name stays a single path component

    Args:
        name: Candidate file name (without extension)

    Returns:
        Name with '/', '\\' and the platform separators swapped for a look-alike
    """
    separators = {'/', '\\', os.sep}
    if os.altsep:
        separators.add(os.altsep)

    for separator in separators:
        name = name.replace(separator, PATH_SEPARATOR_SUBSTITUTE)

    # "." and ".." would still resolve to a directory
    if name.strip() in ('', '.', '..'):
        return UNKNOWN_NAME

    return name


def fold_to_ascii(text: str) -> str:
    """
    Fold accented characters to their closest ASCII form

    Args:
        text: Text to fold

    Returns:
        ASCII-only text ("Beyoncé" -> "Beyonce"), unmappable characters dropped
    """
    decomposed = unicodedata.normalize('NFKD', text)
    return decomposed.encode('ascii', 'ignore').decode('ascii')


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Safe to call repeatedly; intermediate directories are created as well.

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human readable format

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "3:45", "1:23:45")
    """
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_size(size_str: str) -> int:
    """
    Parse size string to bytes

    Args:
        size_str: Size string like "10MB", "1GB", "500KB"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is not a recognised size
    """
    size_str = size_str.upper().strip()

    multipliers = {
        'B': 1,
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMG]?B)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    return int(float(number) * multipliers[unit])
