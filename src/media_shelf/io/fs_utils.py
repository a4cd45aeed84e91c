"""Filesystem helpers shared by the scanners."""

import os
import time
import uuid
from pathlib import Path
from typing import Iterable, List

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png")
VIDEO_EXTENSIONS = ("mp4",)
BOOK_EXTENSIONS = ("txt",)

# Namespace for deterministic ids, so the same path gets the same id on every scan.
ID_NAMESPACE = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")


def generate_id(value: str) -> str:
    """UUIDv5 of ``value`` in the library namespace."""
    return str(uuid.uuid5(ID_NAMESPACE, value))


def is_hidden(path: Path) -> bool:
    return Path(path).name.startswith(".")


def _has_extension(path: Path, extensions: Iterable[str]) -> bool:
    suffix = Path(path).suffix
    if not suffix:
        return False
    return suffix[1:].lower() in extensions


def is_image_file(path: Path) -> bool:
    return _has_extension(path, IMAGE_EXTENSIONS)


def is_video_file(path: Path) -> bool:
    return _has_extension(path, VIDEO_EXTENSIONS)


def is_book_file(path: Path) -> bool:
    return _has_extension(path, BOOK_EXTENSIONS)


def current_time_millis() -> int:
    return int(time.time() * 1000)


def created_time_millis(stat_result: os.stat_result) -> int:
    """Birth time in epoch milliseconds, falling back to mtime."""
    created = getattr(stat_result, "st_birthtime", None)
    if created is None:
        created = stat_result.st_mtime
    return int(created * 1000)


def list_visible_entries(folder: Path) -> List[os.DirEntry]:
    """
    List the non-hidden entries of ``folder``.

    Raises:
        OSError: If the folder cannot be opened.
    """
    with os.scandir(folder) as entries:
        return [entry for entry in entries if not entry.name.startswith(".")]


def entry_is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def entry_is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False
