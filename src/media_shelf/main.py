"""Command-line entry point for scanning libraries and maintaining the cache."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from media_shelf.core import LibraryKind, MediaShelfError
from media_shelf.io import parse_book
from media_shelf.logging_setup import setup_logging
from media_shelf.services import SettingsManager, VideoCoverTool
from media_shelf.services.image_transcoder import ensure_qt_core

app = typer.Typer(
    name="media-shelf",
    help="Index book, comic and video folders and keep their thumbnails cached.",
    add_completion=False,
)


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _build_coordinator(video_tool: Optional[Path] = None):
    """
    Composition root: the only place that knows how to wire all components.
    """
    from media_shelf.coordinators import LibraryCoordinator

    ensure_qt_core()
    settings = SettingsManager()
    tool = VideoCoverTool(video_tool) if video_tool else VideoCoverTool.locate()
    return LibraryCoordinator(settings=settings, video_tool=tool)


@app.callback()
def main(
    debug: Annotated[bool, typer.Option("--debug", help="Log debug output to stderr")] = False,
) -> None:
    """Index book, comic and video folders and keep their thumbnails cached."""
    setup_logging(debug)


@app.command()
def scan(
    library_path: Annotated[Path, typer.Argument(help="Library root folder")],
    library_id: Annotated[str, typer.Option("--library-id", help="Id attached to every entry")],
    kind: Annotated[
        Optional[LibraryKind],
        typer.Option("--kind", help="Library kind; detected when omitted"),
    ] = None,
    video_tool: Annotated[
        Optional[Path],
        typer.Option("--video-tool", help="Path to the video cover executable"),
    ] = None,
) -> None:
    """Scan a library and print its entries as JSON."""
    coordinator = _build_coordinator(video_tool)
    try:
        if kind is None:
            kind = coordinator.get_library_type(library_path)
        _echo_json(coordinator.scan_library(library_path, kind, library_id))
    except MediaShelfError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)


@app.command()
def images(
    comic_path: Annotated[Path, typer.Argument(help="Comic folder")],
) -> None:
    """Thumbnail the pages of one comic and print them as JSON."""
    coordinator = _build_coordinator()
    try:
        pages = coordinator.scan_comic_images(comic_path)
    except MediaShelfError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    _echo_json([page.to_dict() for page in pages])


@app.command()
def detect(
    library_path: Annotated[Path, typer.Argument(help="Library root folder")],
) -> None:
    """Print the detected library kind."""
    from media_shelf.io import detect_library_kind

    try:
        typer.echo(detect_library_kind(library_path).value)
    except MediaShelfError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)


@app.command()
def book(
    book_path: Annotated[Path, typer.Argument(help="Text book file")],
) -> None:
    """Print a book's lines and chapters as JSON."""
    try:
        _echo_json(parse_book(book_path).to_dict())
    except MediaShelfError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)


@app.command()
def clean(
    days: Annotated[int, typer.Option("--days", help="Delete thumbnails older than this")] = 30,
    max_size_mb: Annotated[
        int, typer.Option("--max-size-mb", help="Then trim the cache to this size")
    ] = 1024,
) -> None:
    """Evict old thumbnails and trim the cache to a size budget."""
    coordinator = _build_coordinator()
    deleted, freed = coordinator.clean_thumbnail_cache(days, max_size_mb)
    _echo_json({"filesDeleted": deleted, "bytesFreed": freed})


@app.command()
def stats() -> None:
    """Print thumbnail count and total size."""
    coordinator = _build_coordinator()
    count, total = coordinator.get_thumbnail_stats()
    _echo_json({"fileCount": count, "totalBytes": total})


if __name__ == "__main__":
    app()
