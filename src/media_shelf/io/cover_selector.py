"""Cover image selection for comic folders."""

import logging
import re
from pathlib import Path
from typing import List, Optional

from media_shelf.io.fs_utils import (
    IMAGE_EXTENSIONS,
    entry_is_file,
    is_image_file,
    list_visible_entries,
)
from media_shelf.services.text_processing import natural_sorted

logger = logging.getLogger(__name__)

EXPLICIT_COVER_STEM = "1001"
PAGE_ZERO_SUFFIX = "_p0"

_PAGED_STEM = re.compile(r"^(?P<prefix>.*)_p(?P<page>\d+)$")


class CoverSelector:
    """Picks the image that represents a folder.

    Priority, first match wins:

    1. ``1001.<ext>`` for any image extension, case-insensitive.
    2. The first image in natural order whose stem ends in ``_p0``.
    3. When the natural-first image is ``<prefix>_p<N>`` and a sibling
       ``<prefix>_p0.<ext>`` exists, that sibling.
    4. The natural-first image.

    The choice must stay stable between scans because the viewer keys
    its cover display on it.
    """

    def find_cover(self, folder_path: Path) -> Optional[Path]:
        """Return the cover image of ``folder_path`` or None.

        An unreadable folder is treated as having no images.
        """
        folder_path = Path(folder_path)
        try:
            names = [
                entry.name
                for entry in list_visible_entries(folder_path)
                if entry_is_file(entry) and is_image_file(Path(entry.name))
            ]
        except OSError as e:
            logger.debug("Cannot list %s for cover selection: %s", folder_path, e)
            return None

        chosen = self.select_from_names(names)
        return folder_path / chosen if chosen is not None else None

    def select_from_names(self, names: List[str]) -> Optional[str]:
        """Apply the cover priority to a list of image file names."""
        if not names:
            return None

        by_lower_name = {name.lower(): name for name in names}
        for ext in IMAGE_EXTENSIONS:
            explicit = by_lower_name.get(f"{EXPLICIT_COVER_STEM}.{ext}")
            if explicit is not None:
                return explicit

        ordered = natural_sorted(names)

        for name in ordered:
            if Path(name).stem.endswith(PAGE_ZERO_SUFFIX):
                return name

        first = ordered[0]
        match = _PAGED_STEM.match(Path(first).stem)
        if match:
            sibling = f"{match.group('prefix')}{PAGE_ZERO_SUFFIX}{Path(first).suffix}"
            if sibling in names:
                return sibling

        return first
