# tests/test_utils.py
"""Test utilities and helpers"""

import pytest
from pathlib import Path

from blueme.utils.exceptions import (
    BluemeError,
    ExternalToolError,
    SourceNotFoundError,
    TargetNotFoundError,
)
from blueme.utils.helpers import (
    PATH_SEPARATOR_SUBSTITUTE,
    UNKNOWN_NAME,
    ensure_directory,
    fold_to_ascii,
    format_duration,
    normalize_string,
    parse_size,
    replace_path_separators,
)
from blueme.utils.validation import (
    locate_tool,
    require_source,
    require_target_directory,
    validate_bitrate,
    validate_source,
    validate_target_directory,
)


SAMPLES = [
    "AC&#47;DC",
    "Simon &amp;amp; Garfunkel",
    "Beyoncé - Halo",
    "Don't Stop (Remastered 2011)",
    "&lt;b&gt;bold&lt;/b&gt;",
    "../../etc/passwd",
    "",
]


class TestNormalizeString:
    """Test tag text normalization"""

    def test_strict_removes_disallowed_characters(self):
        assert normalize_string("AC&#47;DC") == "ACDC"
        assert normalize_string("Beyoncé") == "Beyonc"
        assert normalize_string("What? Really!") == "What Really"
        assert normalize_string("Don't Stop (Live) - side_b") == "Don't Stop (Live) - side_b"

    def test_entities_decoded_until_stable(self):
        assert normalize_string("Simon &amp;amp; Garfunkel", strip=False) == "Simon & Garfunkel"
        assert normalize_string("AC&#47;DC", strip=False) == "AC/DC"

    def test_empty_input(self):
        assert normalize_string("") == ""
        assert normalize_string(None) == ""

    @pytest.mark.parametrize("strip", [True, False])
    def test_idempotent(self, strip):
        for sample in SAMPLES:
            once = normalize_string(sample, strip=strip)
            assert normalize_string(once, strip=strip) == once


class TestHelpers:
    """Test helper functions"""

    def test_replace_path_separators(self):
        assert replace_path_separators("AC/DC") == f"AC{PATH_SEPARATOR_SUBSTITUTE}DC"
        assert replace_path_separators("a\\b") == f"a{PATH_SEPARATOR_SUBSTITUTE}b"
        assert "/" not in replace_path_separators("../../x")

    def test_replace_path_separators_dot_names(self):
        assert replace_path_separators(".") == UNKNOWN_NAME
        assert replace_path_separators("..") == UNKNOWN_NAME
        assert replace_path_separators("") == UNKNOWN_NAME

    def test_fold_to_ascii(self):
        assert fold_to_ascii("Beyoncé") == "Beyonce"
        assert fold_to_ascii("Motörhead") == "Motorhead"
        assert fold_to_ascii("plain") == "plain"

    def test_ensure_directory_is_idempotent(self, temp_dir):
        target = temp_dir / "a" / "b"
        assert ensure_directory(target) == target
        assert ensure_directory(target) == target
        assert target.is_dir()

    def test_format_duration(self):
        assert format_duration(160) == "2:40"
        assert format_duration(3661) == "1:01:01"
        assert format_duration(0) == "0:00"

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512 KB") == 512 * 1024
        assert parse_size("1gb") == 1024 ** 3
        with pytest.raises(ValueError):
            parse_size("ten megabytes")


class TestValidation:
    """Test startup validation"""

    def test_target_directory(self, temp_dir):
        assert validate_target_directory(temp_dir) == (True, None)

        is_valid, error = validate_target_directory(temp_dir / "missing")
        assert not is_valid
        assert "does not exist" in error

        some_file = temp_dir / "file.txt"
        some_file.write_text("x")
        is_valid, error = validate_target_directory(some_file)
        assert not is_valid
        assert "not a directory" in error

    def test_require_target_directory_raises(self, temp_dir):
        with pytest.raises(TargetNotFoundError) as exc_info:
            require_target_directory(temp_dir / "missing")
        assert isinstance(exc_info.value, BluemeError)
        assert exc_info.value.details['path'] == str(temp_dir / "missing")

    def test_source_directory_and_playlist(self, temp_dir):
        playlist = temp_dir / "list.xspf"
        playlist.write_text("<playlist/>")

        assert validate_source(temp_dir)[0]
        assert validate_source(playlist, playlist=True)[0]
        assert not validate_source(playlist)[0]
        assert not validate_source(temp_dir, playlist=True)[0]

    def test_require_source_rejects_unknown_playlist_type(self, temp_dir):
        text_file = temp_dir / "notes.txt"
        text_file.write_text("hello")
        with pytest.raises(SourceNotFoundError, match="Unsupported playlist type"):
            require_source(text_file, playlist=True)

    def test_require_source_returns_path(self, temp_dir):
        assert require_source(str(temp_dir)) == Path(temp_dir)

    def test_validate_bitrate(self):
        assert validate_bitrate("320k") == (True, None)
        assert validate_bitrate("192K")[0]
        assert validate_bitrate("128000")[0]
        assert not validate_bitrate("fast")[0]
        assert not validate_bitrate("0k")[0]

    def test_locate_tool_missing(self):
        with pytest.raises(ExternalToolError) as exc_info:
            locate_tool("blueme-no-such-binary")
        assert exc_info.value.details['binary'] == "blueme-no-such-binary"
