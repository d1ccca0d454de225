"""Configuration for pydrivesync.

Values are resolved from environment variables first, then from a JSON
config file in the user's config directory.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.googleapis.com/drive/v3"

ENV_ACCESS_TOKEN = "DRIVESYNC_ACCESS_TOKEN"
ENV_API_URL = "DRIVESYNC_API_URL"
ENV_CONFIG_DIR = "DRIVESYNC_CONFIG_DIR"

CONFIG_FILE_NAME = "config.json"
SELECTION_FILE_NAME = "selection.json"


class Config:
    """Resolved configuration for the Drive client and the CLI."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding config files. Defaults to
                        $DRIVESYNC_CONFIG_DIR or ~/.config/pydrivesync
        """
        self._config_dir = config_dir

    def get_config_dir(self) -> Path:
        """Get the configuration directory."""
        if self._config_dir is not None:
            return self._config_dir
        env_dir = os.environ.get(ENV_CONFIG_DIR)
        if env_dir:
            return Path(env_dir)
        return Path.home() / ".config" / "pydrivesync"

    def get_config_path(self) -> Path:
        """Get the path of the JSON config file."""
        return self.get_config_dir() / CONFIG_FILE_NAME

    def get_selection_path(self) -> Path:
        """Get the path of the persisted folder selection."""
        return self.get_config_dir() / SELECTION_FILE_NAME

    def _load_file(self) -> dict[str, Any]:
        """Load the config file, returning an empty dict when absent or corrupt."""
        path = self.get_config_path()
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read config file %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def access_token(self) -> Optional[str]:
        """OAuth access token for the Drive API."""
        return os.environ.get(ENV_ACCESS_TOKEN) or self._load_file().get(
            "access_token"
        )

    @property
    def api_url(self) -> str:
        """Base URL of the Drive API."""
        return (
            os.environ.get(ENV_API_URL)
            or self._load_file().get("api_url")
            or DEFAULT_API_URL
        )

    def is_configured(self) -> bool:
        """Check whether an access token is available."""
        return bool(self.access_token)

    def save_access_token(self, token: str) -> None:
        """Persist the access token to the config file.

        Args:
            token: OAuth access token
        """
        data = self._load_file()
        data["access_token"] = token
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        # Token file should only be readable by the owner
        try:
            path.chmod(0o600)
        except OSError as e:
            logger.debug("Could not restrict permissions on %s: %s", path, e)
        logger.debug("Saved access token to %s", path)


config = Config()
