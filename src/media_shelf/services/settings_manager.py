"""Settings Manager - Resolves the thumbnail cache directory."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "MEDIA_SHELF_CACHE_DIR"
CONFIG_FILENAME = "config.json"
THUMBNAIL_SUBDIR = "thumbnail"


class SettingsManager:
    """
    Manages the cache directory override.

    The override comes from ``MEDIA_SHELF_CACHE_DIR`` (environment or a
    ``.env`` file in the project root) or, failing that, the ``cache_dir``
    key of ``config.json`` in the config directory. Without an override
    thumbnails go under ``~/.media_shelf/cache``.
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        config_dir: Optional[Path] = None,
    ):
        """
        Initialize settings manager.

        Args:
            project_root: Directory holding the .env file.
                         If None, the current working directory is used.
            config_dir: Directory holding config.json. Defaults to ~/.media_shelf.
        """
        self._project_root = Path(project_root) if project_root else Path.cwd()
        self._config_dir = Path(config_dir) if config_dir else Path.home() / ".media_shelf"
        load_dotenv(dotenv_path=self._project_root / ".env")

    @property
    def config_path(self) -> Path:
        return self._config_dir / CONFIG_FILENAME

    @property
    def default_cache_dir(self) -> Path:
        return self._config_dir / "cache"

    def get_config(self) -> dict:
        """Return ``{"cache_dir": <override or None>}``."""
        return {"cache_dir": self.get_cache_dir_override()}

    def get_cache_dir_override(self) -> Optional[str]:
        """Cache directory override from the environment or config.json."""
        env_value = os.getenv(CACHE_DIR_ENV)
        if env_value and env_value.strip():
            return env_value.strip()
        return self._load_config().get("cache_dir") or None

    def set_cache_dir(self, path: str) -> None:
        """Persist a cache directory override to config.json.

        Raises:
            RuntimeError: If the config file cannot be written.
        """
        config = self._load_config()
        config["cache_dir"] = str(path)
        self._save_config(config)

    def resolve_thumbnail_dir(self) -> Path:
        """Directory for thumbnails, created if missing."""
        override = self.get_cache_dir_override()
        base = Path(override) if override else self.default_cache_dir
        thumb_dir = base / THUMBNAIL_SUBDIR
        thumb_dir.mkdir(parents=True, exist_ok=True)
        return thumb_dir

    def _load_config(self) -> dict:
        if not self.config_path.exists():
            return {}
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_config(self, config: dict) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._config_dir, suffix=".tmp", delete=False
            ) as tmp:
                json.dump(config, tmp, indent=2)
            os.replace(tmp.name, self.config_path)
        except OSError as e:
            raise RuntimeError(f"Failed to save config {self.config_path}: {e}") from e
