"""Library Coordinator - Wires settings, cache, workers and scanner together."""

from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from media_shelf.core import ComicImage, LibraryKind
from media_shelf.io import FileTagStore, LibraryScanner, detect_library_kind
from media_shelf.services import (
    ParallelExecutor,
    SettingsManager,
    ThumbnailCache,
    VideoCoverTool,
)
from media_shelf.services.parallel_executor import DEFAULT_WORKER_COUNT


class LibraryCoordinator(QObject):
    """Entry point for library scans and thumbnail cache maintenance.

    Responsibilities:
    - Resolve the thumbnail directory once from settings
    - Scan libraries and comic folders (blocking until the batch is done)
    - Clean the thumbnail cache and report its usage
    - Change the cache directory override

    Scans and cleanup must not overlap: cleanup assumes no thumbnail is
    being generated.
    """

    library_scanned = Signal(str, int)  # (library kind, entry count)
    cache_cleaned = Signal(int, int)  # (files deleted, bytes freed)

    def __init__(
        self,
        settings: SettingsManager,
        thumbnail_cache: Optional[ThumbnailCache] = None,
        executor: Optional[ParallelExecutor] = None,
        tag_store: Optional[FileTagStore] = None,
        video_tool: Optional[VideoCoverTool] = None,
        worker_count: int = DEFAULT_WORKER_COUNT,
    ):
        super().__init__()

        if settings is None:
            raise ValueError("SettingsManager must not be None")

        self.settings = settings
        self.thumbnail_cache = thumbnail_cache or ThumbnailCache(
            settings.resolve_thumbnail_dir()
        )
        self.executor = executor or ParallelExecutor(worker_count=worker_count)
        self.scanner = LibraryScanner(
            thumbnail_cache=self.thumbnail_cache,
            executor=self.executor,
            tag_store=tag_store,
            video_tool=video_tool,
        )

    def get_library_type(self, library_path: Path) -> LibraryKind:
        return detect_library_kind(Path(library_path))

    def scan_library(
        self,
        library_path: Path,
        kind: LibraryKind,
        library_id: str,
    ) -> List[dict]:
        """Scan a library and return its serialized entries.

        Raises:
            LibraryIOError: If the library root cannot be opened.
        """
        kind = LibraryKind(kind)
        entries = self.scanner.scan(Path(library_path), kind, library_id)
        self.library_scanned.emit(kind.value, len(entries))
        return [entry.to_dict() for entry in entries]

    def scan_comic_images(self, comic_path: Path) -> List[ComicImage]:
        return self.scanner.scan_comic_images(Path(comic_path))

    def clean_thumbnail_cache(
        self,
        days_old: Optional[int] = None,
        max_size_mb: Optional[int] = None,
    ) -> tuple[int, int]:
        """Evict thumbnails older than ``days_old`` days, then trim to ``max_size_mb``.

        Defaults are 30 days and 1024 MB.

        Returns:
            (files_deleted, bytes_freed)
        """
        result = self.thumbnail_cache.evict_days(
            days_old=30 if days_old is None else days_old,
            max_size_mb=1024 if max_size_mb is None else max_size_mb,
        )
        self.cache_cleaned.emit(result.files_deleted, result.bytes_freed)
        return result.as_tuple()

    def get_thumbnail_stats(self) -> tuple[int, int]:
        """(file_count, total_bytes) of the thumbnail directory."""
        return self.thumbnail_cache.stats().as_tuple()

    def get_cache_dir(self) -> Optional[str]:
        return self.settings.get_config()["cache_dir"]

    def set_cache_dir(self, path: str) -> None:
        """Persist a new cache directory and switch to it.

        Thumbnails already in the old directory are left where they are.
        """
        self.settings.set_cache_dir(path)
        self.thumbnail_cache = ThumbnailCache(self.settings.resolve_thumbnail_dir())
        self.scanner.thumbnail_cache = self.thumbnail_cache
