"""Configuration for the photo-trail web API."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from photo_trail.trail.config import DEFAULT_TICK_INTERVAL_MS

logger = logging.getLogger(__name__)

# Defaults for end-users
DEFAULT_DB_PATH = str(Path.home() / ".photo-trail" / "database.db")
DEFAULT_GEOCODER = "nominatim"
DEFAULT_USER_AGENT = "photo-trail/0.1.0"
DEFAULT_LANGUAGE = "ko"
DEFAULT_RECURSIVE = True

# Configuration file path
CONFIG_FILE_PATH = Path.home() / ".photo-trail" / "config.json"

# Environment overrides
ENV_DB_PATH = "PHOTO_TRAIL_DB_PATH"
ENV_GEOCODER = "PHOTO_TRAIL_GEOCODER"


class WebConfig:
    """Configuration manager for web application."""

    def __init__(
        self,
        db_path: Optional[str] = None,
        tick_interval_ms: Optional[int] = None,
        auto_zoom_enabled: Optional[bool] = None,
        geocoder: Optional[str] = None,
        user_agent: Optional[str] = None,
        language: Optional[str] = None,
        recursive: Optional[bool] = None,
    ):
        db_path = db_path or os.environ.get(ENV_DB_PATH)
        # Expand ~ in db_path if present
        if db_path:
            db_path = os.path.expanduser(db_path)
        self.db_path = db_path or DEFAULT_DB_PATH
        self.tick_interval_ms = int(tick_interval_ms or DEFAULT_TICK_INTERVAL_MS)
        self.auto_zoom_enabled = True if auto_zoom_enabled is None else bool(auto_zoom_enabled)
        self.geocoder = geocoder or os.environ.get(ENV_GEOCODER) or DEFAULT_GEOCODER
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.language = language or DEFAULT_LANGUAGE
        self.recursive = DEFAULT_RECURSIVE if recursive is None else bool(recursive)

        if self.tick_interval_ms <= 0:
            raise ValueError(f"tick_interval_ms must be positive, got {self.tick_interval_ms}")

        # Ensure database directory exists
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_from_file(cls, config_path: Optional[Path] = None) -> "WebConfig":
        """Load configuration from JSON file."""
        if config_path is None:
            config_path = CONFIG_FILE_PATH

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)

            return cls(
                db_path=config_data.get("db_path"),
                tick_interval_ms=config_data.get("tick_interval_ms"),
                auto_zoom_enabled=config_data.get("auto_zoom_enabled"),
                geocoder=config_data.get("geocoder"),
                user_agent=config_data.get("user_agent"),
                language=config_data.get("language"),
                recursive=config_data.get("recursive"),
            )
        except (json.JSONDecodeError, IOError) as e:
            # An unreadable config file falls back to defaults
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return cls()

    def save_to_file(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to JSON file."""
        if config_path is None:
            config_path = CONFIG_FILE_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except IOError as e:
            logger.error(f"Failed to save config file {config_path}: {e}")

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "db_path": self.db_path,
            "tick_interval_ms": self.tick_interval_ms,
            "auto_zoom_enabled": self.auto_zoom_enabled,
            "geocoder": self.geocoder,
            "user_agent": self.user_agent,
            "language": self.language,
            "recursive": self.recursive,
        }


def get_default_config() -> WebConfig:
    """Create default configuration for web application."""
    return WebConfig.load_from_file()
