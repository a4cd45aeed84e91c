"""Shared fixtures: a headless Qt core application and image file factories."""

from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QColor, QImage


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """Ensure a QCoreApplication exists for image plugins and thread pools."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


def write_image(path: Path, width: int, height: int, fmt: str = "JPEG", color: str = "red") -> Path:
    image = QImage(width, height, QImage.Format.Format_RGB888)
    image.fill(QColor(color))
    assert image.save(str(path), fmt), f"Could not write test image {path}"
    return path


@pytest.fixture
def make_image():
    """Factory writing a solid-colour image: make_image(path, w, h, fmt="JPEG")."""
    return write_image


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "thumbnail"
    path.mkdir()
    return path
