"""
Configuration package for blueme-converter

Settings are grouped into dataclass sections (transcode, normalize, metadata,
naming, discovery, logging) and loaded from the first YAML file found, then
overridden by BLUEME_* environment variables.

Usage:
    from blueme.config import get_settings

    settings = get_settings()
    print(settings.transcode.bitrate)
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings'
]
