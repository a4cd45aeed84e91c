"""Wrapper around the external video cover tool.

Video decoding is out of scope for this package; cover frames come from
an opaque helper executable invoked as ``<tool> <input_path> <output_path>``.
It either writes a JPEG at ``output_path`` or exits nonzero.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from media_shelf.core.errors import ExternalToolError

logger = logging.getLogger(__name__)

DEFAULT_TOOL_NAME = "video-cover"


class VideoCoverTool:
    """Runs the cover tool for one video at a time, blocking until it exits."""

    def __init__(self, executable: Path) -> None:
        self.executable = Path(executable)

    @classmethod
    def locate(
        cls, candidates: Iterable[Path] = (), name: str = DEFAULT_TOOL_NAME
    ) -> Optional["VideoCoverTool"]:
        """Find the tool among ``candidates`` or on PATH.

        Returns:
            A VideoCoverTool, or None when no executable is found.
        """
        for candidate in candidates:
            candidate = Path(candidate)
            if candidate.is_file():
                return cls(candidate)
        found = shutil.which(name)
        if found:
            return cls(Path(found))
        logger.info("Video cover tool %r not found; videos will have no cover", name)
        return None

    def generate(self, input_path: Path, output_path: Path) -> None:
        """Write the cover frame of ``input_path`` to ``output_path``.

        Raises:
            ExternalToolError: If the tool cannot be started or exits nonzero.
        """
        try:
            completed = subprocess.run(
                [str(self.executable), str(input_path), str(output_path)],
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise ExternalToolError(f"Cannot run {self.executable}: {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise ExternalToolError(
                f"Thumb gen failed ({completed.returncode}) for {input_path}: {stderr}"
            )
