#!/usr/bin/env python3
"""
Integration tests for the library workflow - settings to scan to cleanup.

Tests the complete journey through library functionality:
1. Resolve the cache directory from settings
2. Detect and scan a comic library → covers are thumbnailed
3. Rescan → nothing is regenerated
4. Open a comic → page thumbnails
5. Clean the cache → usage drops back
6. The same flow through the command line
"""

import json
import logging
import os
import time

import pytest
from typer.testing import CliRunner

from media_shelf.coordinators import LibraryCoordinator
from media_shelf.core import FileIdentity, LibraryKind
from media_shelf.main import app
from media_shelf.services import SettingsManager
from media_shelf.services.settings_manager import CACHE_DIR_ENV
from media_shelf.services.text_processing import from_asset_url


@pytest.fixture
def cache_root(tmp_path, monkeypatch):
    root = tmp_path / "cache-root"
    monkeypatch.setenv(CACHE_DIR_ENV, str(root))
    return root


@pytest.fixture
def library(tmp_path, make_image):
    root = tmp_path / "library"
    for title, pages in [("Chapter 10", 3), ("Chapter 9", 2), ("Chapter 1", 4)]:
        folder = root / title
        folder.mkdir(parents=True)
        for page in range(1, pages + 1):
            make_image(folder / f"page{page}.jpg", 800, 1200)
    return root


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_full_comic_workflow(tmp_path, cache_root, library):
    settings = SettingsManager(project_root=tmp_path, config_dir=tmp_path / "config")
    coordinator = LibraryCoordinator(settings=settings, worker_count=3)
    thumb_dir = cache_root / "thumbnail"
    assert coordinator.thumbnail_cache.cache_dir == thumb_dir

    kind = coordinator.get_library_type(library)
    assert kind == LibraryKind.COMIC

    comics = coordinator.scan_library(library, kind, "main")
    assert [c["title"] for c in comics] == ["Chapter 1", "Chapter 9", "Chapter 10"]
    for comic in comics:
        cover_source = library / comic["title"] / "page1.jpg"
        expected = coordinator.thumbnail_cache.thumbnail_path(FileIdentity.from_path(cover_source))
        assert from_asset_url(comic["cover"]) == str(expected)
    assert coordinator.scanner.last_totals.new_count == 3

    decodes_before = sum(s.transcoder.decode_calls for s in coordinator.executor.slots)
    rescanned = coordinator.scan_library(library, kind, "main")
    decodes_after = sum(s.transcoder.decode_calls for s in coordinator.executor.slots)
    assert rescanned == comics
    assert decodes_after == decodes_before
    assert coordinator.scanner.last_totals.new_count == 0

    pages = coordinator.scan_comic_images(library / "Chapter 1")
    assert [p.filename for p in pages] == ["page1.jpg", "page2.jpg", "page3.jpg", "page4.jpg"]
    assert all((p.width, p.height) == (256, 384) for p in pages)
    # page1 was already cached as the cover
    assert coordinator.scanner.last_totals.new_count == 3

    count, total = coordinator.get_thumbnail_stats()
    assert count == 6
    assert coordinator.thumbnail_cache.usage().as_tuple() == (count, total)

    old = time.time() - 60 * 24 * 60 * 60
    for path in thumb_dir.iterdir():
        os.utime(path, (old, old))
    assert coordinator.clean_thumbnail_cache() == (count, total)
    assert coordinator.get_thumbnail_stats() == (0, 0)

    coordinator.scan_library(library, kind, "main")
    assert coordinator.scanner.last_totals.new_count == 3


def test_command_line_workflow(tmp_path, cache_root, library, monkeypatch, restore_root_logger):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    detected = runner.invoke(app, ["detect", str(library)])
    assert detected.exit_code == 0
    assert detected.stdout.strip() == "comic"

    scanned = runner.invoke(app, ["scan", str(library), "--library-id", "cli"])
    assert scanned.exit_code == 0, scanned.output
    entries = json.loads(scanned.stdout)
    assert [e["title"] for e in entries] == ["Chapter 1", "Chapter 9", "Chapter 10"]
    assert all(e["libraryId"] == "cli" for e in entries)

    stats = runner.invoke(app, ["stats"])
    assert json.loads(stats.stdout)["fileCount"] == 3

    cleaned = runner.invoke(app, ["clean", "--days", "30", "--max-size-mb", "0"])
    assert json.loads(cleaned.stdout)["filesDeleted"] == 3

    missing = runner.invoke(app, ["scan", str(tmp_path / "missing"), "--library-id", "x", "--kind", "comic"])
    assert missing.exit_code == 1


def test_command_line_book(tmp_path, restore_root_logger):
    book_path = tmp_path / "novel.txt"
    book_path.write_text("第1章 开始\n\n正文\n番外 一\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["book", str(book_path)])

    assert result.exit_code == 0
    content = json.loads(result.stdout)
    assert content["lines"] == ["第1章 开始", "正文", "番外 一"]
    assert content["chapters"] == [
        {"title": "第1章 开始", "lineIndex": 0},
        {"title": "番外 一", "lineIndex": 2},
    ]
