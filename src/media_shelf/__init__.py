"""
Media Shelf - Library indexing and thumbnail caching for a media viewer.

This package scans local collections and produces:
- Book libraries grouped by author folder
- Comic libraries with a cover thumbnail per folder
- Video libraries with cover frames from an external tool
- Page thumbnails for individual comics
"""

__version__ = "0.1.0"

# Make key components available at package level
from media_shelf.core import Author, Book, Comic, ComicImage, LibraryKind, Video
from media_shelf.io import CoverSelector, LibraryScanner, detect_library_kind
from media_shelf.services import ImageTranscoder, ParallelExecutor, ThumbnailCache

__all__ = [
    "Author",
    "Book",
    "Comic",
    "ComicImage",
    "Video",
    "LibraryKind",
    "CoverSelector",
    "LibraryScanner",
    "detect_library_kind",
    "ImageTranscoder",
    "ParallelExecutor",
    "ThumbnailCache",
]
