"""
Centralized path management for daily-videos.

Resolves the working directory and the locations of the configuration,
preference and pin files.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import logging


class PathManager:
    """Manages daily-videos file paths."""

    # Directory names
    APP_DIR_NAME = "daily-videos"
    HOME_ENV_VAR = "DAILY_VIDEOS_HOME"

    # File names
    CONFIG_FILE = "config.json"
    PREFERENCES_FILE = "preferred_media.json"
    PINS_FILE = "pinned_media.json"

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize path manager."""
        self.logger = logger or logging.getLogger(__name__)
        self._working_dir: Optional[Path] = None

    def _default_user_dir(self) -> Path:
        """Platform-appropriate per-user data directory."""
        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / self.APP_DIR_NAME
        if sys.platform.startswith("win"):
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / self.APP_DIR_NAME
            return Path.home() / "AppData" / "Roaming" / self.APP_DIR_NAME
        return Path.home() / ".config" / self.APP_DIR_NAME

    @property
    def working_dir(self) -> Path:
        """
        Get the working directory for daily-videos data.

        Priority order:
        1. DAILY_VIDEOS_HOME environment variable (explicit override)
        2. Platform user data directory
        """
        if self._working_dir is not None:
            return self._working_dir

        env_override = os.environ.get(self.HOME_ENV_VAR)
        if env_override:
            env_path = Path(env_override).expanduser().resolve()
            self.logger.debug(f"Using {self.HOME_ENV_VAR} override: {env_path}")
            self._working_dir = env_path
        else:
            self._working_dir = self._default_user_dir()

        return self._working_dir

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in (self.working_dir, self.data_dir, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)
            self.logger.debug(f"Ensured directory exists: {directory}")

    @property
    def data_dir(self) -> Path:
        """Get the data directory for preferences and pins."""
        return self.working_dir / "data"

    @property
    def log_dir(self) -> Path:
        """Get the log directory."""
        return self.working_dir / "logs"

    @property
    def config_path(self) -> Path:
        """Get the configuration file path."""
        return self.working_dir / self.CONFIG_FILE

    @property
    def preferences_path(self) -> Path:
        """Get the preferred-media store path."""
        return self.data_dir / self.PREFERENCES_FILE

    @property
    def pins_path(self) -> Path:
        """Get the pinned-media store path."""
        return self.data_dir / self.PINS_FILE


_path_manager: Optional[PathManager] = None


def get_path_manager() -> PathManager:
    """Return the process-wide path manager."""
    global _path_manager
    if _path_manager is None:
        _path_manager = PathManager()
    return _path_manager


def reset_path_manager() -> None:
    """Forget the cached path manager (used when DAILY_VIDEOS_HOME changes)."""
    global _path_manager
    _path_manager = None
