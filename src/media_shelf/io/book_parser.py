"""Book Parser - splits a plain-text book into lines and chapter headings."""

from pathlib import Path

from media_shelf.core import BookContent, Chapter, LibraryIOError

SPECIAL_CHAPTER_PREFIXES = ("序章", "终章", "番外", "后记", "尾声")
CHAPTER_SUFFIXES = frozenset("章回节卷集幕")
CHINESE_NUMERALS = frozenset("一二三四五六七八九十百千")


def _is_chapter_number_char(char: str) -> bool:
    return ("0" <= char <= "9") or char in CHINESE_NUMERALS


def extract_chapter_title(line: str):
    """Return the trimmed line if it is a chapter heading, else None.

    Headings are either one of the special prefixes (prologue, epilogue,
    extra, afterword, coda) or 第 + numerals + a chapter suffix, e.g.
    "第12章 归来" or "第三回".
    """
    trimmed = line.strip()
    if trimmed.startswith(SPECIAL_CHAPTER_PREFIXES):
        return trimmed
    if not trimmed.startswith("第"):
        return None

    i = 1
    while i < len(trimmed) and _is_chapter_number_char(trimmed[i]):
        i += 1
    if i == 1 or i >= len(trimmed):
        return None
    return trimmed if trimmed[i] in CHAPTER_SUFFIXES else None


def parse_book(path: Path) -> BookContent:
    """
    Read a UTF-8 text book, dropping blank lines and indexing chapters.

    ``Chapter.line_index`` refers to positions in ``BookContent.lines``.

    Raises:
        LibraryIOError: If the file cannot be read or decoded.
    """
    try:
        text = Path(path).read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LibraryIOError(f"Failed to read file: {e}") from e

    # Only "\n" and "\r\n" end a line; other Unicode separators stay inside it.
    raw_lines = (line.removesuffix("\r") for line in text.split("\n"))
    lines = [line for line in raw_lines if line.strip()]
    chapters = []
    for index, line in enumerate(lines):
        title = extract_chapter_title(line)
        if title is not None:
            chapters.append(Chapter(title=title, line_index=index))

    return BookContent(lines=lines, chapters=chapters)
