"""
Filesystem locations used by Asset Sync.
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """Get the directory where the app is located (for user-writable files)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).resolve().parent.parent.parent


def get_default_data_root() -> Path:
    """Default <appDataRoot> holding every synced local root."""
    return get_app_dir() / "data"


def get_settings_path() -> Path:
    """Get path to the settings file."""
    return get_app_dir() / "asset_sync.json"
