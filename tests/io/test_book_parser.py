"""Tests for book parsing and chapter detection."""

import pytest

from media_shelf.core import LibraryIOError
from media_shelf.io import extract_chapter_title, parse_book


@pytest.mark.parametrize(
    "line, expected",
    [
        ("第1章 开始", "第1章 开始"),
        ("  第十二回 归来  ", "第十二回 归来"),
        ("第三百卷", "第三百卷"),
        ("序章", "序章"),
        ("番外 一", "番外 一"),
        ("第章", None),
        ("第一", None),
        ("第1天", None),
        ("普通的一行", None),
    ],
)
def test_extract_chapter_title(line, expected):
    assert extract_chapter_title(line) == expected


def test_parse_book_drops_blank_lines_and_indexes_chapters(tmp_path):
    book = tmp_path / "book.txt"
    book.write_text("序章\n\n第一句。\n   \n第2章 风起\n第二句。\n", encoding="utf-8")

    content = parse_book(book)

    assert content.lines == ["序章", "第一句。", "第2章 风起", "第二句。"]
    assert [(c.title, c.line_index) for c in content.chapters] == [("序章", 0), ("第2章 风起", 2)]


def test_parse_book_missing_file(tmp_path):
    with pytest.raises(LibraryIOError, match="Failed to read file"):
        parse_book(tmp_path / "missing.txt")


def test_parse_book_splits_only_on_newlines(tmp_path):
    book = tmp_path / "book.txt"
    book.write_bytes("第1章 开始\r\n一 二\x0c三\x85四\r\n第2章 结束\n".encode("utf-8"))

    content = parse_book(book)

    assert content.lines == ["第1章 开始", "一 二\x0c三\x85四", "第2章 结束"]
    assert [(c.title, c.line_index) for c in content.chapters] == [
        ("第1章 开始", 0),
        ("第2章 结束", 2),
    ]
