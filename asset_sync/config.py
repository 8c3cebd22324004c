"""
Configuration management for Asset Sync.

Settings live in a JSON file next to the app (asset_sync.json). Missing or
unreadable files fall back to defaults; environment variables override both.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from .core.constants import (
    DEFAULT_API_ROOT,
    DEFAULT_BRANCH,
    DEFAULT_MEDIA_ROOT,
    LISTING_TIMEOUT,
    MAX_REDIRECTS,
    MIN_VALID_SIZE,
    POINTER_TIMEOUT,
    REQUEST_TIMEOUT,
)
from .core.paths import get_default_data_root

logger = logging.getLogger(__name__)

# Environment variable -> settings field
ENV_OVERRIDES = {
    "ASSET_SYNC_DATA_ROOT": "data_root",
    "ASSET_SYNC_API_ROOT": "api_root",
    "ASSET_SYNC_MEDIA_ROOT": "media_root",
    "ASSET_SYNC_BUNDLED_DIR": "bundled_dir",
    "GITHUB_TOKEN": "api_token",
}

_PATH_FIELDS = {"data_root", "bundled_dir"}


@dataclass
class SyncSettings:
    """Tunables for a sync pass."""
    data_root: Path = field(default_factory=get_default_data_root)
    api_root: str = DEFAULT_API_ROOT
    media_root: str = DEFAULT_MEDIA_ROOT
    default_branch: str = DEFAULT_BRANCH
    request_timeout: float = REQUEST_TIMEOUT
    listing_timeout: float = LISTING_TIMEOUT
    pointer_timeout: float = POINTER_TIMEOUT
    max_redirects: int = MAX_REDIRECTS
    min_valid_size: int = MIN_VALID_SIZE
    bundled_dir: Optional[Path] = None
    api_token: Optional[str] = None
    path: Optional[Path] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            if f.name in ("path", "api_token"):
                continue
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Path) else value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SyncSettings":
        settings = cls()
        known = {f.name for f in fields(cls)} - {"path"}
        for key, value in data.items():
            if key not in known:
                continue
            settings._set(key, value)
        return settings

    @classmethod
    def load(cls, path: Path, use_env: bool = True) -> "SyncSettings":
        """Load settings from file, then apply environment overrides."""
        settings = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    settings = cls.from_dict(data)
                else:
                    logger.warning("Ignoring %s: expected a JSON object", path)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Could not load %s: %s", path, e)

        settings.path = path
        if use_env:
            settings.apply_env()
        return settings

    def save(self):
        """Save settings to file."""
        if not self.path:
            raise ValueError("No path set for settings")
        with open(self.path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def apply_env(self, environ: Optional[dict] = None):
        """Apply environment variable overrides."""
        environ = os.environ if environ is None else environ
        for var, name in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                self._set(name, value)

    def _set(self, name: str, value):
        if name in _PATH_FIELDS:
            if name == "data_root" and not value:
                return
            value = Path(value).expanduser() if value else None
        setattr(self, name, value)
