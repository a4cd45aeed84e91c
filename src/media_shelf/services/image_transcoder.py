"""Image decode, resize and JPEG encode for thumbnails.

Uses Qt QImage/QImageReader rather than QPixmap so that transcoding can
run on pool threads without a GUI application.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from PySide6.QtCore import QBuffer, QByteArray, QCoreApplication, QIODevice, QSize, Qt
from PySide6.QtGui import QImage, QImageReader

from media_shelf.core.errors import DecodeError, EncodeError, LibraryIOError

logger = logging.getLogger(__name__)

THUMB_WIDTH = 256
THUMB_HEIGHT = 384
THUMB_QUALITY = 70

JPEG_MAGIC = b"\xff\xd8\xff"


def ensure_qt_core() -> QCoreApplication:
    """Return the running Qt application, creating a headless one if needed."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def is_jpeg(header: bytes) -> bool:
    return header[:3] == JPEG_MAGIC


def jpeg_scale_denominator(width: int, target_width: int) -> int:
    """Coarsest of 1, 2, 4, 8 that keeps the decoded width >= target_width."""
    ratio = width // target_width if target_width > 0 else 0
    for denom in (8, 4, 2):
        if ratio >= denom:
            return denom
    return 1


def scaled_height(original_width: int, original_height: int, target_width: int) -> int:
    """Height that keeps the original aspect ratio at ``target_width``."""
    if original_width <= 0:
        raise DecodeError("Source width is 0")
    return max(1, round(target_width * original_height / original_width))


@dataclass
class DecodedImage:
    """A decoded RGB image plus the size of the source before any downscale.

    ``image`` may be smaller than ``original_width`` x ``original_height``
    when the JPEG fast path decoded at a reduced scale.
    """

    image: QImage
    original_width: int
    original_height: int

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()


class ImageTranscoder:
    """Turns a source image into a fixed-width JPEG thumbnail.

    One instance is owned by each worker slot and reused for every item
    that slot processes. ``decode_calls`` counts real decodes so callers
    can verify that cache hits skip decoding.
    """

    def __init__(self, target_width: int = THUMB_WIDTH, quality: int = THUMB_QUALITY) -> None:
        if target_width <= 0:
            raise ValueError("target_width must be positive")
        self.target_width = target_width
        self.quality = quality
        self.decode_calls = 0

    def decode(self, path: Path) -> DecodedImage:
        """Decode ``path`` into an RGB image.

        JPEG sources are decoded at the coarsest power-of-two scale that
        still covers the target width; everything else is decoded at full
        resolution.

        Raises:
            LibraryIOError: If the file cannot be read.
            DecodeError: If the data is not a readable image.
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise LibraryIOError(f"Cannot read image {path}: {e}") from e

        self.decode_calls += 1
        # Qt cannot open paths that are not valid UTF-8, so it reads from memory.
        buffer = QBuffer()
        buffer.setData(QByteArray(raw))
        buffer.open(QIODevice.OpenModeFlag.ReadOnly)
        reader = QImageReader(buffer)
        reader.setDecideFormatFromContent(True)

        size = reader.size()
        if not size.isValid() or size.width() <= 0 or size.height() <= 0:
            raise DecodeError(f"Cannot read image header {path}: {reader.errorString()}")
        original_width, original_height = size.width(), size.height()

        if is_jpeg(raw):
            denom = jpeg_scale_denominator(original_width, self.target_width)
            if denom > 1:
                reader.setScaledSize(
                    QSize(-(-original_width // denom), -(-original_height // denom))
                )

        image = reader.read()
        if image.isNull():
            raise DecodeError(f"Failed to decode image {path}: {reader.errorString()}")

        return DecodedImage(
            image=image.convertToFormat(QImage.Format.Format_RGB888),
            original_width=original_width,
            original_height=original_height,
        )

    def resize(self, decoded: DecodedImage) -> QImage:
        """Scale to the target width with bilinear filtering.

        The target height comes from the original source dimensions, not
        the reduced decode size, so the fast path cannot add rounding error.
        """
        target_height = scaled_height(
            decoded.original_width, decoded.original_height, self.target_width
        )
        resized = decoded.image.scaled(
            self.target_width,
            target_height,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        if resized.isNull():
            raise DecodeError("Failed to scale image")
        return resized

    def encode(self, image: QImage) -> bytes:
        """Encode ``image`` as JPEG at the configured quality.

        Raises:
            EncodeError: If Qt cannot encode the image.
        """
        data = QByteArray()
        buffer = QBuffer(data)
        if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
            raise EncodeError("Failed to open encode buffer")
        try:
            if not image.save(buffer, "JPEG", self.quality):
                raise EncodeError("Failed to encode thumbnail as JPEG")
        finally:
            buffer.close()
        return bytes(data.data())

    def transcode(self, path: Path) -> Tuple[bytes, int, int]:
        """Decode, resize and encode ``path``.

        Returns:
            (jpeg_bytes, width, height) of the thumbnail.
        """
        decoded = self.decode(path)
        resized = self.resize(decoded)
        return self.encode(resized), resized.width(), resized.height()


def read_image_size(path: Path) -> Tuple[int, int]:
    """Read image dimensions from the header only.

    Raises:
        DecodeError: If the header cannot be parsed.
    """
    reader = QImageReader(str(path))
    size = reader.size()
    if not size.isValid():
        raise DecodeError(f"Cannot read image size {path}: {reader.errorString()}")
    return size.width(), size.height()
