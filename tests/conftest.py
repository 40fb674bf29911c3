"""Test configuration and fixtures"""

import logging
import logging.handlers
import pytest
import tempfile
from pathlib import Path

from blueme.audio.process import ProcessResult
from blueme.convert.pipeline import ConversionPipeline
from blueme.utils.logger import ProgressHandler


ENV_OVERRIDES = ('BLUEME_FFMPEG', 'BLUEME_MP3GAIN', 'BLUEME_TRANSCODE_TIMEOUT', 'BLUEME_LOG_LEVEL')


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by setup_logging during a test"""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler, (ProgressHandler, logging.handlers.RotatingFileHandler)):
            handler.close()
            root.removeHandler(handler)


@pytest.fixture
def clean_env(monkeypatch):
    """Drop BLUEME_* overrides inherited from the environment"""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(temp_dir):
    """Minimal config file isolating tests from ~/.blueme/config.yaml"""
    path = temp_dir / "config.yaml"
    path.write_text(
        "logging:\n"
        "  colored_output: false\n"
        "  show_progress: false\n",
        encoding="utf-8"
    )
    return path


class FakeExtractor:
    """Returns canned tags by source file name"""

    def __init__(self, tags_by_name=None, fail_on=()):
        self.tags_by_name = tags_by_name or {}
        self.fail_on = set(fail_on)

    def extract(self, path):
        name = Path(path).name
        if name in self.fail_on:
            raise RuntimeError(f"cannot read {name}")
        return dict(self.tags_by_name.get(name, {}))


class FakeTranscoder:
    """Writes a placeholder MP3 instead of running ffmpeg"""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def transcode(self, input_path, output_path, on_line=None):
        self.calls.append((Path(input_path), Path(output_path)))
        if on_line:
            on_line("size=  4096kB time=00:03:30.00 bitrate= 320.0kbits/s")
        if Path(input_path).name in self.fail_on:
            return ProcessResult(args=["ffmpeg"], returncode=1)
        Path(output_path).write_bytes(b"\xff\xfb\x90\x64" + b"\x00" * 412)
        return ProcessResult(args=["ffmpeg"], returncode=0)


class FakeNormalizer:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def normalize(self, path, on_line=None):
        self.calls.append(Path(path))
        return ProcessResult(args=["mp3gain"], returncode=1 if self.fail else 0)


class FakeTagWriter:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def write_tags(self, path, fields):
        self.calls.append((Path(path), dict(fields)))
        return self.result


@pytest.fixture
def make_pipeline():
    """Factory for pipelines wired with fake collaborators"""
    def _make(extractor=None, transcoder=None, normalizer=None, tag_writer=None, **options):
        return ConversionPipeline(
            extractor=extractor or FakeExtractor(),
            transcoder=transcoder or FakeTranscoder(),
            normalizer=normalizer if normalizer is not None else FakeNormalizer(),
            tag_writer=tag_writer or FakeTagWriter(),
            **options
        )
    return _make


@pytest.fixture
def source_files(temp_dir):
    """Factory creating placeholder source audio files"""
    source = temp_dir / "source"
    source.mkdir()

    def _create(*names):
        paths = []
        for name in names:
            path = source / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"audio data for " + name.encode("utf-8"))
            paths.append(path)
        return paths
    return _create


@pytest.fixture
def target_dir(temp_dir):
    target = temp_dir / "usb"
    target.mkdir()
    return target


@pytest.fixture
def mp3_file(temp_dir):
    """A bare MPEG frame stream without any tags"""
    path = temp_dir / "bare.mp3"
    frame = b"\xff\xfb\x90\x64" + b"\x00" * 413
    path.write_bytes(frame * 20)
    return path
