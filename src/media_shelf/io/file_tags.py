"""Starred/deleted flags attached to library files."""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple


class FileTagStore(ABC):
    """Abstract store for the two boolean tags a file can carry."""

    @abstractmethod
    def get(self, path: Path) -> Tuple[bool, bool]:
        """Return (starred, deleted) for ``path``; untagged files are (False, False)."""

    @abstractmethod
    def set(
        self,
        path: Path,
        starred: Optional[bool] = None,
        deleted: Optional[bool] = None,
    ) -> None:
        """Update the tags given; a None argument leaves that tag unchanged."""


class InMemoryFileTagStore(FileTagStore):
    """Session-level tag store. No persistence."""

    def __init__(self):
        self._tags: Dict[str, Tuple[bool, bool]] = {}
        self._lock = threading.Lock()

    def get(self, path: Path) -> Tuple[bool, bool]:
        with self._lock:
            return self._tags.get(str(path), (False, False))

    def set(
        self,
        path: Path,
        starred: Optional[bool] = None,
        deleted: Optional[bool] = None,
    ) -> None:
        key = str(path)
        with self._lock:
            current_starred, current_deleted = self._tags.get(key, (False, False))
            self._tags[key] = (
                current_starred if starred is None else starred,
                current_deleted if deleted is None else deleted,
            )
