"""Services layer - thumbnail generation, caching, workers and settings."""

from media_shelf.services.image_transcoder import (
    THUMB_HEIGHT,
    THUMB_QUALITY,
    THUMB_WIDTH,
    DecodedImage,
    ImageTranscoder,
)
from media_shelf.services.parallel_executor import (
    BatchOutcome,
    BatchTotals,
    ParallelExecutor,
    WorkerSlot,
)
from media_shelf.services.settings_manager import SettingsManager
from media_shelf.services.thumbnail_cache import ThumbnailCache
from media_shelf.services.video_cover_tool import VideoCoverTool

__all__ = [
    "THUMB_WIDTH",
    "THUMB_HEIGHT",
    "THUMB_QUALITY",
    "DecodedImage",
    "ImageTranscoder",
    "ThumbnailCache",
    "VideoCoverTool",
    "ParallelExecutor",
    "WorkerSlot",
    "BatchOutcome",
    "BatchTotals",
    "SettingsManager",
]
