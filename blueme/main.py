"""
Main CLI interface for blueme-converter

This module provides the command-line interface for preparing a USB stick for
the Fiat Blue&Me head unit: every audio file of a directory tree or playlist
is converted to MP3, loudness-normalized, renamed after its tags and left with
a single ID3v1 tag.

The CLI is built using Click framework and provides:
- Conversion (convert)
- Configuration management (config show)
- Output verification (inspect)
- System diagnostics (doctor)
"""

import sys
import click
import functools
from pathlib import Path

from . import __version__
from .config.settings import get_settings, reload_settings
from .audio.metadata import read_id3v1
from .convert.pipeline import ConversionPipeline
from .tracks.discovery import discover_tracks
from .utils.exceptions import ExternalToolError
from .utils.logger import configure_from_settings, get_logger, get_current_log_file
from .utils.helpers import format_duration
from .utils.validation import (
    locate_tool,
    require_source,
    require_target_directory,
    validate_bitrate,
)


logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Fatal errors (missing target, unreadable playlist, bad configuration) end
    the run with a red error line and exit status 1; Ctrl-C exits with 130.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except Exception as e:
            logger.debug(f"Command failed: {e}", exc_info=e)
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
@handle_error
def cli(ctx, version, verbose, config):
    """
    blueme - Convert music for the Fiat Blue&Me car radio

    Produces a flat directory of normalized 320 kbit/s MP3 files named
    "Title - Artist - Album.mp3" and tagged with ID3v1 only.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"blueme-converter v{__version__}")
        return

    settings = reload_settings(config) if config else get_settings()
    configure_from_settings(settings, verbose=verbose)

    ctx.obj['verbose'] = verbose
    if settings.loaded_from:
        logger.debug(f"Loaded config: {settings.loaded_from}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('source', type=click.Path())
@click.argument('target', type=click.Path())
@click.option('--xspf', '-x', is_flag=True, help='SOURCE is a playlist file (XSPF, or M3U)')
@click.option('--force', '-f', is_flag=True, help='Re-encode MP3 sources instead of copying them')
@click.option('--dry-run', is_flag=True, help='Show output names without writing anything')
@click.option('--no-normalize', is_flag=True, help='Skip mp3gain loudness normalization')
@click.option('--bitrate', help='Target MP3 bitrate (default from config, 320k)')
@click.option('--timeout', type=click.IntRange(min=1), help='ffmpeg timeout per file in seconds')
@handle_error
def convert(source, target, xspf, force, dry_run, no_normalize, bitrate, timeout):
    """
    Convert a directory or playlist for Blue&Me

    Every audio file found below SOURCE (or listed in the playlist SOURCE
    with --xspf) is written to the existing directory TARGET. Files are
    processed one at a time; a failing file is reported and skipped.

    Args:
        source: Music directory, or playlist file with --xspf
        target: Existing output directory (e.g. the mounted USB stick)
        xspf: Treat SOURCE as a playlist file
        force: Transcode MP3 sources as well
        dry_run: Preview output names only
        no_normalize: Disable the normalization stage
        bitrate: Bitrate override
        timeout: Transcode timeout override
    """
    settings = get_settings()

    # Apply setting overrides from command line
    if bitrate:
        is_valid, error_msg = validate_bitrate(bitrate)
        if not is_valid:
            click.echo(click.style(error_msg, fg='red'), err=True)
            sys.exit(1)
        settings.transcode.bitrate = bitrate
    if timeout:
        settings.transcode.timeout = timeout
    if no_normalize:
        settings.normalize.enabled = False

    settings.ensure_valid()

    target_dir = require_target_directory(target)
    source_path = require_source(source, playlist=xspf)

    tracks = discover_tracks(source_path, playlist=xspf, extensions=settings.discovery.extensions)
    if not tracks:
        logger.console_warning("No tracks found.")
        return

    if dry_run:
        click.echo("Dry run mode - nothing will be written...")

    pipeline = ConversionPipeline.from_settings(settings, force=force, dry_run=dry_run)
    batch = pipeline.run(tracks, target_dir)

    if batch.failed:
        logger.console_info("\nFailed files:")
        for result in batch.failed:
            logger.console_info(f"   • {result.track.path}: {result.error}")
        sys.exit(1)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@handle_error
def inspect(file):
    """
    Show the tag the head unit will read from an MP3

    Prints the ID3v1 fields of FILE and whether any other tag format is
    still present.
    """
    path = Path(file)
    fields = read_id3v1(path)

    click.echo(f"{path.name}:")
    if fields is None:
        click.echo(click.style("   No ID3v1 tag", fg='yellow'))
    else:
        for name, value in fields.items():
            click.echo(f"   {name.capitalize()}: {value}")

    with open(path, 'rb') as f:
        has_id3v2 = f.read(3) == b'ID3'
    if has_id3v2:
        click.echo(click.style("   ID3v2 tag present (not supported by Blue&Me)", fg='yellow'))


@cli.group()
def config():
    """
    Configuration management

    Command group for viewing the effective configuration.
    """
    pass


@config.command()
@handle_error
def show():
    """
    Show current configuration

    Displays every configuration section after the config file and the
    environment overrides have been applied.
    """
    settings = get_settings()

    click.echo("Current Configuration:\n")
    if settings.loaded_from:
        click.echo(f"Loaded from: {settings.loaded_from}\n")
    else:
        click.echo("Loaded from: defaults\n")

    for section, values in settings.to_dict().items():
        click.echo(f"{section.capitalize()}:")
        for key, value in values.items():
            if isinstance(value, list):
                value = ', '.join(str(item) for item in value)
            click.echo(f"   {key.replace('_', ' ').capitalize()}: {value}")
        click.echo("")


# System diagnostic commands
@cli.command()
@handle_error
def doctor():
    """
    Run system diagnostics

    Checks that the external tools and Python dependencies are available
    and that the configuration is valid.
    """
    click.echo("Running diagnostics...\n")

    issues = []
    settings = get_settings()

    # Check external binaries
    tools = [
        ('ffmpeg', settings.transcode.binary, 'required for converting', True),
        ('mp3gain', settings.normalize.binary, 'required for normalization', settings.normalize.enabled),
    ]

    for display_name, binary, purpose, required in tools:
        try:
            location = locate_tool(binary)
            click.echo(f"{display_name}: {location}")
        except ExternalToolError as e:
            if required:
                click.echo(f"{display_name}: Not found")
                issues.append(f"{e} ({purpose})")
            else:
                click.echo(f"{display_name}: Not found (normalization disabled)")

    # Check Python dependencies
    dependencies = [
        ('mutagen', 'mutagen', 'required for tag handling'),
        ('ffmpeg', 'ffmpeg-python', 'required for building ffmpeg commands'),
    ]

    for module_name, display_name, purpose in dependencies:
        try:
            __import__(module_name)
            click.echo(f"{display_name}: OK")
        except ImportError:
            click.echo(f"{display_name}: Not installed")
            issues.append(f"{display_name} is {purpose}")

    # Check configuration values
    config_errors = settings.validate()
    if config_errors:
        click.echo("Configuration: Invalid")
        issues.extend(config_errors)
    else:
        click.echo(f"Configuration: OK ({settings.loaded_from or 'defaults'})")
    click.echo(f"Transcode timeout: {format_duration(settings.transcode.timeout)}")

    current_log = get_current_log_file()
    if current_log:
        click.echo(f"Logging: {current_log}")
    else:
        click.echo("Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


# Entry point for module execution
if __name__ == '__main__':
    cli()
