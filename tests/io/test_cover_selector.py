"""Tests for CoverSelector - cover priority rules."""

import pytest

from media_shelf.io import CoverSelector


@pytest.fixture
def selector():
    return CoverSelector()


class TestSelectFromNames:
    def test_explicit_cover_wins(self, selector):
        assert selector.select_from_names(["1001.jpg", "a.png", "b.png"]) == "1001.jpg"

    def test_explicit_cover_is_case_insensitive(self, selector):
        assert selector.select_from_names(["a.png", "1001.PNG"]) == "1001.PNG"

    def test_explicit_cover_beats_page_zero(self, selector):
        assert selector.select_from_names(["x_p0.jpg", "1001.jpeg"]) == "1001.jpeg"

    def test_page_zero_marker(self, selector):
        assert selector.select_from_names(["page2_p0.jpg", "page2.jpg"]) == "page2_p0.jpg"

    def test_first_page_zero_in_natural_order(self, selector):
        names = ["b10_p0.jpg", "b2_p0.jpg", "a.jpg"]
        assert selector.select_from_names(names) == "b2_p0.jpg"

    def test_natural_order_fallback(self, selector):
        assert selector.select_from_names(["page10.jpg", "page2.jpg"]) == "page2.jpg"

    def test_paged_first_image_without_sibling(self, selector):
        assert selector.select_from_names(["art_p3.png", "art_p12.png"]) == "art_p3.png"

    def test_no_images(self, selector):
        assert selector.select_from_names([]) is None


class TestFindCover:
    def test_finds_cover_in_folder(self, selector, tmp_path):
        for name in ["page10.jpg", "page2.jpg", "notes.txt", ".hidden.jpg"]:
            (tmp_path / name).write_bytes(b"x")

        assert selector.find_cover(tmp_path) == tmp_path / "page2.jpg"

    def test_ignores_non_images_and_subfolders(self, selector, tmp_path):
        (tmp_path / "1001.jpg").mkdir()
        (tmp_path / "readme.md").write_text("x")
        (tmp_path / "cover.PNG").write_bytes(b"x")

        assert selector.find_cover(tmp_path) == tmp_path / "cover.PNG"

    def test_folder_without_images(self, selector, tmp_path):
        (tmp_path / "readme.md").write_text("x")
        assert selector.find_cover(tmp_path) is None

    def test_missing_folder(self, selector, tmp_path):
        assert selector.find_cover(tmp_path / "missing") is None
