"""Content-addressed thumbnail cache.

Thumbnails live in a single flat directory as ``{key}.jpg``, where the
key is derived from the source file's inode, size and mtime. There is no
index: a file's presence means the thumbnail is valid, and its mtime and
size are the only eviction record.

Every file is written to a temp file in the cache directory and renamed
into place, so readers never observe a partial thumbnail. Two writers on
the same key produce identical output and the last rename wins.
"""

import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from media_shelf.core.errors import DecodeError, EncodeError, ExternalToolError
from media_shelf.core.thumbnail_records import (
    CacheStats,
    EvictionResult,
    FileIdentity,
    ThumbnailResult,
)
from media_shelf.services.image_transcoder import (
    THUMB_HEIGHT,
    THUMB_WIDTH,
    ImageTranscoder,
    read_image_size,
)
from media_shelf.services.video_cover_tool import VideoCoverTool

logger = logging.getLogger(__name__)

THUMB_SUFFIX = ".jpg"
SECONDS_PER_DAY = 24 * 60 * 60
BYTES_PER_MB = 1024 * 1024


class ThumbnailCache:
    """Ensures thumbnails exist for source files and keeps the directory bounded.

    The cache directory is passed in explicitly, so independent caches
    can coexist (one per test, for example).

    With ``single_flight`` enabled, concurrent ``ensure`` calls for the
    same key inside this process wait for the first one instead of
    transcoding again; the waiters report a hit. Eviction must not run
    while generation is in flight; callers schedule it during idle time.
    """

    def __init__(self, cache_dir: Path, single_flight: bool = True) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.single_flight = single_flight

        self._in_flight: Dict[str, threading.Event] = {}
        self._in_flight_lock = threading.Lock()

        self._usage: Optional[CacheStats] = None
        self._usage_lock = threading.Lock()

    def thumbnail_path(self, identity: FileIdentity) -> Path:
        return self.cache_dir / f"{identity.cache_key()}{THUMB_SUFFIX}"

    def contains(self, identity: FileIdentity) -> bool:
        return self.thumbnail_path(identity).exists()

    def ensure(
        self,
        source_path: Path,
        identity: FileIdentity,
        transcoder: ImageTranscoder,
    ) -> ThumbnailResult:
        """Return the thumbnail for ``source_path``, creating it on a miss.

        A hit returns the stored dimensions with ``new_bytes == 0`` and
        never decodes the source.

        Raises:
            LibraryIOError: If the source cannot be read.
            DecodeError: If the source is not a readable image.
            EncodeError: If the thumbnail cannot be encoded or written.
        """
        out_path = self.thumbnail_path(identity)

        def generate() -> ThumbnailResult:
            data, width, height = transcoder.transcode(source_path)
            self._commit_bytes(out_path, data)
            return ThumbnailResult(width, height, len(data), out_path)

        return self._ensure_key(out_path, generate)

    def ensure_video_cover(
        self,
        source_path: Path,
        identity: FileIdentity,
        tool: VideoCoverTool,
    ) -> ThumbnailResult:
        """Return the cover frame for a video, running ``tool`` on a miss.

        Raises:
            ExternalToolError: If the tool fails.
            EncodeError: If the produced cover cannot be committed.
        """
        out_path = self.thumbnail_path(identity)

        def generate() -> ThumbnailResult:
            try:
                tmp_path = self._temp_path(out_path)
            except OSError as e:
                raise EncodeError(f"Cannot create temp file in {self.cache_dir}: {e}") from e
            try:
                tool.generate(Path(source_path), tmp_path)
                new_bytes = tmp_path.stat().st_size
                if new_bytes == 0:
                    raise ExternalToolError(f"Video cover tool wrote nothing for {source_path}")
                os.replace(tmp_path, out_path)
            except OSError as e:
                raise EncodeError(f"Failed to commit video cover {out_path}: {e}") from e
            finally:
                tmp_path.unlink(missing_ok=True)
            width, height = self._dimensions_or_placeholder(out_path)
            return ThumbnailResult(width, height, new_bytes, out_path)

        return self._ensure_key(out_path, generate)

    def _ensure_key(
        self, out_path: Path, generate: Callable[[], ThumbnailResult]
    ) -> ThumbnailResult:
        existing = self._read_existing(out_path)
        if existing is not None:
            return existing

        if not self.single_flight:
            return generate()

        key = out_path.stem
        with self._in_flight_lock:
            event = self._in_flight.get(key)
            leader = event is None
            if leader:
                event = threading.Event()
                self._in_flight[key] = event

        if not leader:
            event.wait()
            existing = self._read_existing(out_path)
            if existing is not None:
                return existing
            # The leader failed; fail the same way rather than report a hit.
            return generate()

        try:
            return generate()
        finally:
            with self._in_flight_lock:
                self._in_flight.pop(key, None)
            event.set()

    def _read_existing(self, out_path: Path) -> Optional[ThumbnailResult]:
        if not out_path.exists():
            return None
        try:
            width, height = read_image_size(out_path)
        except DecodeError as e:
            logger.warning("Unreadable cached thumbnail %s, regenerating: %s", out_path, e)
            return None
        return ThumbnailResult(width, height, 0, out_path)

    def _dimensions_or_placeholder(self, path: Path) -> Tuple[int, int]:
        try:
            return read_image_size(path)
        except DecodeError:
            return THUMB_WIDTH, THUMB_HEIGHT

    def _temp_path(self, out_path: Path) -> Path:
        fd, name = tempfile.mkstemp(
            prefix=f".{out_path.stem}.", suffix=".tmp", dir=self.cache_dir
        )
        os.close(fd)
        return Path(name)

    def _commit_bytes(self, out_path: Path, data: bytes) -> None:
        """Write ``data`` to ``out_path`` via temp file and atomic rename."""
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                prefix=f".{out_path.stem}.",
                suffix=".tmp",
                dir=self.cache_dir,
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
            os.replace(tmp_path, out_path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise EncodeError(f"Failed to write thumbnail {out_path}: {e}") from e

    def _cache_files(self) -> List[Tuple[Path, int, float]]:
        """(path, size, mtime) for every regular file in the cache directory."""
        files = []
        try:
            entries = list(os.scandir(self.cache_dir))
        except FileNotFoundError:
            return files
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                st = entry.stat()
            except OSError:
                continue
            files.append((Path(entry.path), st.st_size, st.st_mtime))
        return files

    def stats(self) -> CacheStats:
        """Count files and bytes with a full directory walk."""
        files = self._cache_files()
        stats = CacheStats(len(files), sum(size for _, size, _ in files))
        with self._usage_lock:
            self._usage = stats
        return stats

    def usage(self) -> CacheStats:
        """Last known usage, walking the directory only the first time."""
        with self._usage_lock:
            if self._usage is not None:
                return self._usage
        return self.stats()

    def record_new(self, count: int, size: int) -> None:
        """Add a finished batch's new thumbnails to the known usage."""
        if count <= 0:
            return
        with self._usage_lock:
            if self._usage is not None:
                self._usage = self._usage.add(count, size)

    def evict(
        self,
        max_age: float,
        max_total_size: int,
        now: Optional[float] = None,
    ) -> EvictionResult:
        """Delete stale files, then the oldest ones while over the size budget.

        Phase 1 removes every file whose mtime is older than ``max_age``
        seconds. Phase 2 runs only if the remaining files still exceed
        ``max_total_size`` bytes and removes them oldest first, stopping
        as soon as the total is at or under the budget.

        Must not run concurrently with thumbnail generation.
        """
        now = time.time() if now is None else now
        cutoff = now - max_age

        deleted = 0
        freed = 0
        remaining = []
        remaining_size = 0

        for path, size, mtime in self._cache_files():
            if mtime < cutoff:
                if self._remove(path):
                    deleted += 1
                    freed += size
            else:
                remaining.append((mtime, path, size))
                remaining_size += size

        if remaining_size > max_total_size:
            remaining.sort(key=lambda item: item[0])
            for _, path, size in remaining:
                if remaining_size <= max_total_size:
                    break
                if self._remove(path):
                    deleted += 1
                    freed += size
                    remaining_size -= size

        with self._usage_lock:
            if self._usage is not None:
                self._usage = self._usage.subtract(deleted, freed)

        logger.info(
            "Cleaned %d thumbnails, freed %.2f MB", deleted, freed / BYTES_PER_MB
        )
        return EvictionResult(deleted, freed)

    def evict_days(self, days_old: int = 30, max_size_mb: int = 1024) -> EvictionResult:
        """``evict`` with the age in days and the budget in megabytes."""
        return self.evict(days_old * SECONDS_PER_DAY, max_size_mb * BYTES_PER_MB)

    def _remove(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except OSError as e:
            logger.warning("Could not remove cached thumbnail %s: %s", path, e)
            return False
