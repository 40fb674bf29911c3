"""
Utility modules for blueme-converter
"""

from .logger import (
    setup_logging,
    get_logger,
    configure_from_settings,
    OperationLogger,
    create_operation_logger,
)

from .helpers import (
    normalize_string,
    replace_path_separators,
    fold_to_ascii,
    ensure_directory,
    format_duration,
    parse_size,
)

from .exceptions import (
    BluemeError,
    ConfigError,
    SourceNotFoundError,
    TargetNotFoundError,
    PlaylistParseError,
    ExternalToolError,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'configure_from_settings',
    'OperationLogger',
    'create_operation_logger',
    'normalize_string',
    'replace_path_separators',
    'fold_to_ascii',
    'ensure_directory',
    'format_duration',
    'parse_size',
    'BluemeError',
    'ConfigError',
    'SourceNotFoundError',
    'TargetNotFoundError',
    'PlaylistParseError',
    'ExternalToolError',
]
