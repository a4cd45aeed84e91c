"""Library Scanner - walks a library root and builds its entries.

Thumbnail work for comics, comic pages and videos is fanned out over a
ParallelExecutor; the natural-order sort happens once, after the batch.
Only an unreadable library root is an error. Anything that goes wrong
with a single item is logged and replaced by default values.
"""

import logging
import os
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from media_shelf.core import (
    Author,
    Book,
    Comic,
    ComicImage,
    FileIdentity,
    LibraryEntry,
    LibraryIOError,
    LibraryKind,
    MediaShelfError,
    ThumbnailResult,
    Video,
)
from media_shelf.io.cover_selector import CoverSelector
from media_shelf.io.file_tags import FileTagStore, InMemoryFileTagStore
from media_shelf.io.fs_utils import (
    created_time_millis,
    current_time_millis,
    entry_is_dir,
    entry_is_file,
    generate_id,
    is_book_file,
    is_image_file,
    is_video_file,
    list_visible_entries,
)
from media_shelf.services import (
    THUMB_HEIGHT,
    THUMB_WIDTH,
    BatchTotals,
    ParallelExecutor,
    ThumbnailCache,
    VideoCoverTool,
    WorkerSlot,
)
from media_shelf.services.text_processing import natural_key, to_asset_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _open_root(library_path: Path) -> List[os.DirEntry]:
    try:
        return list_visible_entries(library_path)
    except OSError as e:
        raise LibraryIOError(f"Cannot open library {library_path}: {e}") from e


def _stat_or_default(path: Path) -> Tuple[int, int]:
    """(size, created_at) of ``path``, or (0, now) when it cannot be read."""
    try:
        st = path.stat()
    except OSError:
        return 0, current_time_millis()
    return st.st_size, created_time_millis(st)


def detect_library_kind(library_path: Path) -> LibraryKind:
    """
    Guess the kind of a library from its first visible entries.

    A video file at the top level means a video library. Otherwise the
    first visible child of the first non-empty subfolder decides: a book
    file means a book library, anything else a comic library. Comic is
    also the default.

    Raises:
        LibraryIOError: If the root cannot be opened.
    """
    library_path = Path(library_path)
    for entry in _open_root(library_path):
        entry_path = Path(entry.path)
        if entry_is_file(entry) and is_video_file(entry_path):
            logger.info("Detected video library at %s", library_path)
            return LibraryKind.VIDEO

        if entry_is_dir(entry):
            try:
                children = list_visible_entries(entry_path)
            except OSError:
                continue
            if not children:
                continue
            if is_book_file(Path(children[0].path)):
                logger.info("Detected book library at %s", library_path)
                return LibraryKind.BOOK
            logger.info("Detected comic library at %s", library_path)
            return LibraryKind.COMIC

    logger.info("Defaulting to comic library at %s", library_path)
    return LibraryKind.COMIC


class LibraryScanner:
    """Builds library entries for book, comic and video libraries.

    ``last_totals`` holds the new-thumbnail count and bytes of the most
    recent parallel batch; the same totals are added to the cache's
    usage figures.
    """

    def __init__(
        self,
        thumbnail_cache: ThumbnailCache,
        executor: ParallelExecutor,
        cover_selector: Optional[CoverSelector] = None,
        tag_store: Optional[FileTagStore] = None,
        video_tool: Optional[VideoCoverTool] = None,
    ) -> None:
        if thumbnail_cache is None:
            raise ValueError("ThumbnailCache must not be None")
        if executor is None:
            raise ValueError("ParallelExecutor must not be None")
        self.thumbnail_cache = thumbnail_cache
        self.executor = executor
        self.cover_selector = cover_selector or CoverSelector()
        self.tag_store = tag_store or InMemoryFileTagStore()
        self.video_tool = video_tool
        self.last_totals = BatchTotals()

    def scan(
        self, library_path: Path, kind: LibraryKind, library_id: str
    ) -> List[LibraryEntry]:
        """Scan ``library_path`` as a library of ``kind``.

        Returns:
            Authors for a book library, Comics for a comic library and
            Videos for a video library, in natural order.

        Raises:
            LibraryIOError: If the library root cannot be opened.
        """
        kind = LibraryKind(kind)
        match kind:
            case LibraryKind.BOOK:
                return self.scan_books(library_path, library_id)
            case LibraryKind.COMIC:
                return self.scan_comics(library_path, library_id)
            case LibraryKind.VIDEO:
                return self.scan_videos(library_path, library_id)

    def scan_books(self, library_path: Path, library_id: str) -> List[Author]:
        """Each visible subfolder is an author; its book files are the books."""
        start = time.perf_counter()
        library_path = Path(os.path.abspath(library_path))
        authors = []

        for entry in _open_root(library_path):
            if not entry_is_dir(entry):
                continue
            author_path = Path(entry.path)
            author_id = generate_id(str(author_path))
            author = Author(
                id=author_id,
                name=entry.name,
                path=str(author_path),
                library_id=library_id,
            )

            try:
                book_entries = list_visible_entries(author_path)
            except OSError as e:
                logger.warning("Skipping unreadable author folder %s: %s", author_path, e)
                book_entries = []

            for book_entry in book_entries:
                book_path = Path(book_entry.path)
                if not is_book_file(book_path):
                    continue
                size, created_at = _stat_or_default(book_path)
                starred, deleted = self.tag_store.get(book_path)
                author.books.append(
                    Book(
                        id=generate_id(str(book_path)),
                        title=book_path.stem,
                        path=str(book_path),
                        author_id=author_id,
                        library_id=library_id,
                        size=size,
                        created_at=created_at,
                        starred=starred,
                        deleted=deleted,
                    )
                )

            author.books.sort(key=lambda book: natural_key(book.title))
            authors.append(author)

        authors.sort(key=lambda author: natural_key(author.name))
        logger.info(
            "Scanned book library: %d authors in %.0f ms",
            len(authors),
            (time.perf_counter() - start) * 1000,
        )
        return authors

    def scan_comics(self, library_path: Path, library_id: str) -> List[Comic]:
        """Each visible subfolder is a comic; its cover is thumbnailed."""
        start = time.perf_counter()
        library_path = Path(os.path.abspath(library_path))
        folders = [Path(e.path) for e in _open_root(library_path) if entry_is_dir(e)]

        def build(slot: WorkerSlot, comic_path: Path) -> Comic:
            return self._build_comic(slot, comic_path, library_id)

        def fallback(comic_path: Path) -> Comic:
            return self._default_comic(comic_path, library_id)

        outcome = self.executor.map(self._per_item(build, fallback), folders)
        self._record_totals(outcome.totals)

        comics = sorted(outcome.results, key=lambda comic: natural_key(comic.title))
        logger.info(
            "Scanned comic library: %d comics in %.0f ms",
            len(comics),
            (time.perf_counter() - start) * 1000,
        )
        return comics

    def scan_comic_images(self, comic_path: Path) -> List[ComicImage]:
        """Thumbnail every page image of one comic folder.

        Raises:
            LibraryIOError: If the comic folder cannot be opened.
        """
        start = time.perf_counter()
        comic_path = Path(os.path.abspath(comic_path))
        image_paths = [
            Path(e.path)
            for e in _open_root(comic_path)
            if entry_is_file(e) and is_image_file(Path(e.path))
        ]
        logger.debug("Found %d images in %s", len(image_paths), comic_path)

        outcome = self.executor.map(
            self._per_item(self._build_comic_image, self._default_comic_image),
            image_paths,
        )
        self._record_totals(outcome.totals)

        images = sorted(outcome.results, key=lambda image: natural_key(image.filename))
        for index, image in enumerate(images):
            image.index = index

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Processed %d comic images in %.0f ms (%.0f ms per image)",
            len(images),
            elapsed_ms,
            elapsed_ms / max(1, len(images)),
        )
        return images

    def scan_videos(self, library_path: Path, library_id: str) -> List[Video]:
        """Each visible video file at the top level is a video."""
        start = time.perf_counter()
        library_path = Path(os.path.abspath(library_path))
        video_paths = [
            Path(e.path)
            for e in _open_root(library_path)
            if entry_is_file(e) and is_video_file(Path(e.path))
        ]

        def build(slot: WorkerSlot, video_path: Path) -> Video:
            return self._build_video(slot, video_path, library_id)

        def fallback(video_path: Path) -> Video:
            return self._default_video(video_path, library_id)

        outcome = self.executor.map(self._per_item(build, fallback), video_paths)
        self._record_totals(outcome.totals)

        videos = sorted(outcome.results, key=lambda video: natural_key(video.title))
        logger.info(
            "Scanned video library: %d videos in %.0f ms",
            len(videos),
            (time.perf_counter() - start) * 1000,
        )
        return videos

    def _record_totals(self, totals: BatchTotals) -> None:
        self.last_totals = totals
        self.thumbnail_cache.record_new(totals.new_count, totals.new_bytes)

    @staticmethod
    def _per_item(
        build: Callable[[WorkerSlot, Path], T], fallback: Callable[[Path], T]
    ) -> Callable[[WorkerSlot, Path], T]:
        """Wrap an item builder so any failure yields the fallback entry."""

        def run(slot: WorkerSlot, path: Path) -> T:
            try:
                return build(slot, path)
            except Exception as e:
                logger.warning("Failed to scan %r, using defaults: %s", path, e)
                return fallback(path)

        return run

    def _default_comic(self, comic_path: Path, library_id: str) -> Comic:
        path_str = str(comic_path)
        return Comic(
            id=generate_id(path_str),
            title=comic_path.name,
            path=path_str,
            cover="",
            library_id=library_id,
            created_at=current_time_millis(),
        )

    def _default_comic_image(self, image_path: Path) -> ComicImage:
        url = to_asset_url(image_path)
        return ComicImage(
            path=str(image_path),
            url=url,
            thumbnail=url,
            filename=image_path.name,
            width=THUMB_WIDTH,
            height=THUMB_HEIGHT,
        )

    def _default_video(self, video_path: Path, library_id: str) -> Video:
        path_str = str(video_path)
        return Video(
            id=generate_id(path_str),
            title=video_path.stem,
            path=path_str,
            url=to_asset_url(path_str),
            cover="",
            library_id=library_id,
            created_at=current_time_millis(),
            size=0,
        )

    def _ensure_thumbnail(
        self, slot: WorkerSlot, source_path: Path
    ) -> Optional[ThumbnailResult]:
        """Thumbnail ``source_path`` with the slot's transcoder; None on failure."""
        try:
            identity = FileIdentity.from_path(source_path)
        except OSError as e:
            logger.warning("Cannot stat %s: %s", source_path, e)
            return None
        try:
            result = self.thumbnail_cache.ensure(source_path, identity, slot.transcoder)
        except MediaShelfError as e:
            logger.warning("Failed to process image %s: %s", source_path, e)
            return None
        slot.record(result)
        return result

    def _build_comic(self, slot: WorkerSlot, comic_path: Path, library_id: str) -> Comic:
        path_str = str(comic_path)
        _, created_at = _stat_or_default(comic_path)

        cover = ""
        cover_path = self.cover_selector.find_cover(comic_path)
        if cover_path is not None:
            result = self._ensure_thumbnail(slot, cover_path)
            cover = to_asset_url(result.path if result else cover_path)

        starred, deleted = self.tag_store.get(comic_path)
        return Comic(
            id=generate_id(path_str),
            title=comic_path.name,
            path=path_str,
            cover=cover,
            library_id=library_id,
            created_at=created_at,
            starred=starred,
            deleted=deleted,
        )

    def _build_comic_image(self, slot: WorkerSlot, image_path: Path) -> ComicImage:
        path_str = str(image_path)
        result = self._ensure_thumbnail(slot, image_path)
        if result is not None:
            width, height = result.width, result.height
            thumbnail = to_asset_url(result.path)
        else:
            width, height = THUMB_WIDTH, THUMB_HEIGHT
            thumbnail = to_asset_url(path_str)

        starred, deleted = self.tag_store.get(image_path)
        return ComicImage(
            path=path_str,
            url=to_asset_url(path_str),
            thumbnail=thumbnail,
            filename=image_path.name,
            width=width,
            height=height,
            starred=starred,
            deleted=deleted,
        )

    def _build_video(self, slot: WorkerSlot, video_path: Path, library_id: str) -> Video:
        path_str = str(video_path)
        try:
            st = video_path.stat()
            size, created_at = st.st_size, created_time_millis(st)
            identity: Optional[FileIdentity] = FileIdentity.from_stat(st)
        except OSError as e:
            logger.warning("Cannot stat video %s: %s", video_path, e)
            size, created_at, identity = 0, current_time_millis(), None

        cover = ""
        if identity is not None:
            cover = self._video_cover(slot, video_path, identity)

        starred, deleted = self.tag_store.get(video_path)
        return Video(
            id=generate_id(path_str),
            title=video_path.stem,
            path=path_str,
            url=to_asset_url(path_str),
            cover=cover,
            library_id=library_id,
            created_at=created_at,
            size=size,
            starred=starred,
            deleted=deleted,
        )

    def _video_cover(self, slot: WorkerSlot, video_path: Path, identity: FileIdentity) -> str:
        if self.video_tool is None:
            if self.thumbnail_cache.contains(identity):
                return to_asset_url(self.thumbnail_cache.thumbnail_path(identity))
            return ""
        try:
            result = self.thumbnail_cache.ensure_video_cover(
                video_path, identity, self.video_tool
            )
        except MediaShelfError as e:
            logger.warning("No cover for video %s: %s", video_path, e)
            return ""
        slot.record(result)
        return to_asset_url(result.path)
