"""I/O layer - Library walking, cover selection, book parsing and file tags."""

from .book_parser import extract_chapter_title, parse_book
from .cover_selector import CoverSelector
from .file_tags import FileTagStore, InMemoryFileTagStore
from .library_scanner import LibraryScanner, detect_library_kind

__all__ = [
    "CoverSelector",
    "FileTagStore",
    "InMemoryFileTagStore",
    "LibraryScanner",
    "detect_library_kind",
    "parse_book",
    "extract_chapter_title",
]
