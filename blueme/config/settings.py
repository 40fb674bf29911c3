"""
Configuration management for blueme-converter

This module handles loading, validation, and management of application settings
from YAML files and environment variables. Command line options are applied on
top by the CLI, so the precedence is: defaults < YAML file < environment < CLI.

The configuration is organized into logical sections using dataclasses:
- Transcoding (ffmpeg binary, bitrate, timeout)
- Loudness normalization (mp3gain binary, flags, timeout)
- Tag writing (ID3v1 text encoding)
- Output naming (character policy, length cap)
- Track discovery (audio extension allow-list)
- Logging (level, file output, rotation, console formatting)
"""

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from ..utils.exceptions import ConfigError


# Load environment variables from .env file if present
load_dotenv()


# Encodings the ID3v1 writer can honour (ID3v1 itself is Latin-1 only)
SUPPORTED_TAG_ENCODINGS = ('iso-8859-1', 'latin-1', 'latin1', 'ascii')


@dataclass
class TranscodeConfig:
    """
    Transcoder settings

    The Blue&Me unit plays constant bitrate MP3; 320k is the highest
    bitrate it accepts.
    """
    binary: str = "ffmpeg"
    bitrate: str = "320k"
    timeout: int = 160


@dataclass
class NormalizeConfig:
    """
    Loudness normalization settings

    Default flags: -p preserve timestamps, -r apply track gain,
    -c ignore clipping warnings, -s s skip stored tag info.
    """
    enabled: bool = True
    binary: str = "mp3gain"
    flags: List[str] = field(default_factory=lambda: ["-p", "-r", "-c", "-s", "s"])
    timeout: int = 60


@dataclass
class MetadataConfig:
    """ID3v1 tag writing settings"""
    encoding: str = "iso-8859-1"


@dataclass
class NamingConfig:
    """
    File naming configuration

    strict_charset limits names and tag values to letters, digits and
    ' - _ ( ) space. When disabled, only HTML entities are decoded.
    """
    strict_charset: bool = True
    max_filename_length: int = 200


@dataclass
class DiscoveryConfig:
    """Track discovery settings"""
    extensions: List[str] = field(
        default_factory=lambda: ["flac", "oga", "m4a", "mp3", "wma", "aac", "wav"]
    )


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True
    show_progress: bool = False


class Settings:
    """
    Main settings class that manages all configuration

    The class handles:
    - Loading configuration from YAML files
    - Overriding with environment variables
    - Validating configuration values
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations

        Raises:
            ConfigError: If an explicitly given config file is missing or invalid
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".blueme"
        self.loaded_from: Optional[Path] = None

        # Initialize all configuration objects with default values
        self.transcode = TranscodeConfig()
        self.normalize = NormalizeConfig()
        self.metadata = MetadataConfig()
        self.naming = NamingConfig()
        self.discovery = DiscoveryConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'transcode': self.transcode,
            'normalize': self.normalize,
            'metadata': self.metadata,
            'naming': self.naming,
            'discovery': self.discovery,
            'logging': self.logging,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        if self.config_path and not Path(self.config_path).expanduser().exists():
            raise ConfigError(
                f"Config file not found: {self.config_path}",
                details={'file_path': str(self.config_path)}
            )

        config_paths = [
            Path(self.config_path).expanduser() if self.config_path else None,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        for path in config_paths:
            if path and path.exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    raise ConfigError(
                        f"Failed to load config from {path}: {e}",
                        details={'file_path': str(path)}
                    )
                if not isinstance(config_data, dict):
                    raise ConfigError(
                        f"Config file {path} must contain a mapping of sections",
                        details={'file_path': str(path)}
                    )
                self._apply_config(config_data)
                self.loaded_from = path
                break

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist on the section dataclass are updated;
        unknown sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Apply environment overrides (useful for non-standard binary locations)"""
        env_mappings = {
            'BLUEME_FFMPEG': lambda v: setattr(self.transcode, 'binary', v),
            'BLUEME_MP3GAIN': lambda v: setattr(self.normalize, 'binary', v),
            'BLUEME_TRANSCODE_TIMEOUT': lambda v: setattr(self.transcode, 'timeout', int(v)),
            'BLUEME_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                try:
                    setter(value)
                except ValueError:
                    raise ConfigError(
                        f"Invalid value for {env_var}: {value}",
                        details={'env_var': env_var}
                    )

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human readable problems, empty when the configuration is valid
        """
        errors = []

        if not str(self.transcode.bitrate).rstrip('kK').isdigit():
            errors.append(f"Invalid transcode bitrate: {self.transcode.bitrate}")

        for section, timeout in (('transcode', self.transcode.timeout),
                                 ('normalize', self.normalize.timeout)):
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                errors.append(f"Invalid {section} timeout: {timeout}")

        if self.metadata.encoding.lower() not in SUPPORTED_TAG_ENCODINGS:
            errors.append(
                f"Unsupported ID3v1 tag encoding: {self.metadata.encoding} "
                f"(supported: {', '.join(SUPPORTED_TAG_ENCODINGS)})"
            )

        if not isinstance(self.naming.max_filename_length, int) or self.naming.max_filename_length <= 0:
            errors.append(f"Invalid max_filename_length: {self.naming.max_filename_length}")

        if not self.discovery.extensions:
            errors.append("At least one audio extension must be configured")

        return errors

    def ensure_valid(self) -> None:
        """
        Raise when the configuration is not usable

        Raises:
            ConfigError: Listing every validation problem
        """
        errors = self.validate()
        if errors:
            raise ConfigError(
                "Configuration validation errors: " + "; ".join(errors),
                details={'errors': errors}
            )

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialize every section for display"""
        return {name: asdict(section) for name, section in self._sections().items()}

    def __str__(self) -> str:
        sections = [
            f"Transcode: {self.transcode.binary} @ {self.transcode.bitrate}",
            f"Normalize: {'enabled' if self.normalize.enabled else 'disabled'}",
            f"Strict names: {self.naming.strict_charset}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance, created on first access
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The shared Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
