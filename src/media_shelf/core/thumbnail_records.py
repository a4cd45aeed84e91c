"""Value objects for the on-disk thumbnail cache."""

import hashlib
import os
import struct
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileIdentity:
    """The identity and state of a source file: inode, size and mtime.

    Two identities are equal when the file was not replaced, resized or
    touched, which is exactly when an existing thumbnail is still valid.
    """

    inode: int
    size: int
    mtime: int

    @classmethod
    def from_stat(cls, stat_result: os.stat_result) -> "FileIdentity":
        return cls(
            inode=stat_result.st_ino,
            size=stat_result.st_size,
            mtime=int(stat_result.st_mtime),
        )

    @classmethod
    def from_path(cls, path: Path) -> "FileIdentity":
        """Stat ``path``. Raises OSError when it cannot be read."""
        return cls.from_stat(os.stat(path))

    def cache_key(self) -> str:
        """Hex SHA-256 over the little-endian (inode, size, mtime) triple."""
        hasher = hashlib.sha256()
        hasher.update(struct.pack("<Q", self.inode))
        hasher.update(struct.pack("<Q", self.size))
        hasher.update(struct.pack("<q", self.mtime))
        return hasher.hexdigest()


@dataclass(frozen=True)
class ThumbnailResult:
    """Outcome of ``ThumbnailCache.ensure``.

    Attributes:
        width: Width of the cached thumbnail.
        height: Height of the cached thumbnail.
        new_bytes: Encoded size when the thumbnail was written by this
            call, 0 on a cache hit.
        path: Location of the cached thumbnail.
    """

    width: int
    height: int
    new_bytes: int
    path: Path

    @property
    def is_new(self) -> bool:
        return self.new_bytes > 0


@dataclass(frozen=True)
class CacheStats:
    """File count and total size of the thumbnail directory."""

    file_count: int = 0
    total_bytes: int = 0

    def add(self, count: int, size: int) -> "CacheStats":
        return CacheStats(self.file_count + count, self.total_bytes + size)

    def subtract(self, count: int, size: int) -> "CacheStats":
        return CacheStats(
            max(0, self.file_count - count), max(0, self.total_bytes - size)
        )

    def as_tuple(self) -> tuple[int, int]:
        return (self.file_count, self.total_bytes)


@dataclass(frozen=True)
class EvictionResult:
    """Files removed and bytes reclaimed by one eviction sweep."""

    files_deleted: int = 0
    bytes_freed: int = 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.files_deleted, self.bytes_freed)
