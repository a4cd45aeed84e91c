"""Domain layer - Pure entities describing library content and cache records."""

from .errors import (
    DecodeError,
    EncodeError,
    ExternalToolError,
    LibraryIOError,
    MediaShelfError,
)
from .library_entries import (
    Author,
    Book,
    BookContent,
    Chapter,
    Comic,
    ComicImage,
    LibraryEntry,
    Video,
)
from .library_kind import LibraryKind
from .thumbnail_records import CacheStats, EvictionResult, FileIdentity, ThumbnailResult

__all__ = [
    "Author",
    "Book",
    "BookContent",
    "Chapter",
    "Comic",
    "ComicImage",
    "LibraryEntry",
    "Video",
    "LibraryKind",
    "CacheStats",
    "EvictionResult",
    "FileIdentity",
    "ThumbnailResult",
    "MediaShelfError",
    "LibraryIOError",
    "DecodeError",
    "EncodeError",
    "ExternalToolError",
]
