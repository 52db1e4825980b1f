"""
Command-line interface for oggify-tagger.

This module implements the CLI using Click, providing the single
tag-ogg command that writes a raw Ogg Vorbis stream from standard input
to disk and tags it with source id, title, album, artists and cover art.

Command:
    tag-ogg SOURCE_ID TITLE ALBUM DESTINATION COVER_URL [ARTISTS]...

Options:
    --config <path>                     Explicit config.yaml
    --mime-type <type>                  MIME type of the cover image
    --backend [mutagen|vorbiscomment]   How comments are read and written
    --log-dir <path>                    Also write log files to this directory
    --skip-existing                     Do nothing if the destination exists

Usage:
    # Tag a track produced by a streaming downloader
    downloader --track abc | tag-ogg "spotify:track:abc" "Song" "Album" \\
        ~/Music/song.ogg "https://i.scdn.co/image/..." "Artist1" "Artist2"

    # Let the filename be derived: "Song - Artist1, Artist2.ogg"
    downloader --track abc | tag-ogg "spotify:track:abc" "Song" "Album" \\
        ~/Music/ "https://i.scdn.co/image/..." "Artist1" "Artist2"

Configuration:
    config.yaml in the current directory is read if present. Command line
    options take precedence over the file.

Exit Status:
    0   Every pipeline step succeeded (or the file was skipped)
    1   Invalid input, configuration error, or a failed pipeline step
    2   Command line usage error
    130 Interrupted by user
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from oggify_tagger import __version__
from oggify_tagger.core import (
    Config,
    ConfigError,
    InputError,
    TaggerError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from oggify_tagger.core.config import COMMENT_BACKENDS
from oggify_tagger.download import create_session
from oggify_tagger.pipeline import TagPipeline, TagRequest

logger = get_logger(__name__)


@click.command()
@click.argument("source_id")
@click.argument("title")
@click.argument("album")
@click.argument("destination")
@click.argument("cover_url")
@click.argument("artists", nargs=-1)
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml if present)"
)
@click.option(
    "--mime-type",
    type=str,
    default=None,
    metavar="<type>",
    help="MIME type written into the picture block (default: image/jpeg)"
)
@click.option(
    "--backend",
    type=click.Choice(COMMENT_BACKENDS),
    default=None,
    help="Comment backend: in-process mutagen or the vorbiscomment tool"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Also write log files to this directory"
)
@click.option(
    "--skip-existing",
    is_flag=True,
    help="Skip the track if the destination file already exists"
)
@click.version_option(__version__, prog_name="oggify-tagger", message="%(prog)s %(version)s")
def cli(
    source_id: str,
    title: str,
    album: str,
    destination: str,
    cover_url: str,
    artists: tuple[str, ...],
    config_path: Optional[Path],
    mime_type: Optional[str],
    backend: Optional[str],
    log_dir: Optional[Path],
    skip_existing: bool
) -> None:
    """
    oggify-tagger: Write and tag an Ogg Vorbis stream from standard input.

    Adds SPOTIFY_ID, TITLE, ALBUM and one ARTIST comment per artist, and
    embeds the image at COVER_URL as the front cover. Any previously
    embedded cover is replaced.

    \b
    USAGE:
        ... | tag-ogg ID "Title" "Album" song.ogg "https://..." "Artist"
        ... | tag-ogg ID "Title" "Album" ~/Music/ "https://..." "A1" "A2"
    """
    try:
        config = _load_configuration(config_path, mime_type, backend, log_dir)
        setup_logging(config.logging.directory, config.logging.level)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        shutdown_logging()
        sys.exit(1)

    session = None

    try:
        request = TagRequest(
            source_id=source_id,
            title=title,
            album=album,
            destination=destination,
            cover_url=cover_url,
            artists=artists,
        )

        session = create_session(config.cover.user_agent)
        pipeline = TagPipeline.from_config(config, session=session)
        stream = click.get_binary_stream("stdin")

        result = pipeline.run(request, stream, skip_existing=skip_existing)

        if not result.succeeded:
            failed = result.failed_step
            click.echo(f"Error in {failed.name}: {failed.error.message}", err=True)
            sys.exit(1)

    except InputError as e:
        click.echo(f"Invalid input: {e.message}", err=True)
        sys.exit(1)

    except TaggerError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    finally:
        if session is not None:
            session.close()
        shutdown_logging()


def _load_configuration(
    config_path: Optional[Path],
    mime_type: Optional[str],
    backend: Optional[str],
    log_dir: Optional[Path]
) -> Config:
    """
    Load config.yaml and apply command line overrides.

    Args:
        config_path: Explicit config file, or None for ./config.yaml if present.
        mime_type: --mime-type override.
        backend: --backend override.
        log_dir: --log-dir override.

    Returns:
        Effective Config.

    Raises:
        ConfigError: If the file cannot be read or is invalid, or an
                     override is blank.
    """
    config = load_config(config_path)

    if mime_type is not None:
        if not mime_type.strip():
            raise ConfigError("--mime-type must not be empty")
        config = replace(config, cover=replace(config.cover, mime_type=mime_type))

    if backend is not None:
        config = replace(config, comments=replace(config.comments, backend=backend))

    if log_dir is not None:
        config = replace(
            config,
            logging=replace(config.logging, directory=log_dir.expanduser().resolve())
        )

    return config


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `tag-ogg` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
