"""
Asset Sync - mirror remote binary assets into a local cache.

Given a folder URL, a manifest, or a single file URL, keeps a local directory
in step with the remote: unchanged files are not re-downloaded, files the
remote dropped are removed, and large-file pointers are resolved.

Import from submodules directly:
    from asset_sync.config import SyncSettings
    from asset_sync.sync import AssetSync, SyncResult
    from asset_sync.manifest import parse_manifest
    from asset_sync.catalog import CatalogHandle
"""

__version__ = "1.0.0"
