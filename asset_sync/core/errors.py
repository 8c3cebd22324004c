"""
Exception types for Asset Sync.

Setup errors abort a pass. Download and listing errors are caught where a
single file or directory is processed and recorded in the SyncResult.
"""

from typing import Optional


class AssetSyncError(Exception):
    """Base class for all Asset Sync errors."""


class SyncSetupError(AssetSyncError):
    """The pass cannot start (bad source, local root, or no network)."""


class DownloadError(AssetSyncError):
    """Fetching bytes for a single URL failed."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class HttpStatusError(DownloadError):
    """Terminal response had a non-2xx status."""


class TooManyRedirects(DownloadError):
    """Redirect chain exceeded the hop cap."""


class NetworkError(DownloadError):
    """Connection failed or timed out before a response arrived."""


class PointerResolutionError(DownloadError):
    """A large-file pointer could not be turned into its real payload."""


class ListingError(AssetSyncError):
    """A directory listing request failed or returned something unexpected."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status
