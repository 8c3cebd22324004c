#!/usr/bin/env python3
"""
Asset Sync - mirror remote effect assets into a local cache.

Point it at a repository folder, a manifest, or a single file URL; files that
are already up to date are not downloaded again, and files the remote no
longer has are removed.
"""

import argparse
import sys
from pathlib import Path

from asset_sync.catalog import CatalogHandle, bundled_names
from asset_sync.config import SyncSettings
from asset_sync.core.errors import SyncSetupError
from asset_sync.core.paths import get_settings_path
from asset_sync.sync import AssetSync
from asset_sync.ui import ConsoleProgress, print_summary
from asset_sync.utils import TeeOutput, setup_logging

DEFAULT_SOURCE_URL = "https://github.com/Ziad-Ashraf-Mostafa/ImageMorphy/blob/main/assets_manifest.json"
DEFAULT_LOCAL_ROOT = "morphy_assets"

EXIT_OK = 0
EXIT_FAILED_FILES = 1
EXIT_SETUP_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Asset Sync - mirror remote assets into a local folder"
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=DEFAULT_SOURCE_URL,
        help="Folder, manifest, or file URL (default: the app's asset manifest)",
    )
    parser.add_argument("--local-root", default=DEFAULT_LOCAL_ROOT, help="Local folder name under the data root")
    parser.add_argument("--data-root", type=Path, help="Override the data root directory")
    parser.add_argument("--bundled-dir", type=Path, help="Directory of assets shipped with the app")
    parser.add_argument("--settings", type=Path, default=None, help="Settings file (default: asset_sync.json)")
    parser.add_argument("--log-file", type=Path, help="Also write console output to this file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    settings = SyncSettings.load(args.settings or get_settings_path())
    if args.data_root:
        settings.data_root = args.data_root
    if args.bundled_dir:
        settings.bundled_dir = args.bundled_dir

    color = not args.no_color and sys.stdout.isatty()
    engine = AssetSync(settings, bundled_names=bundled_names(settings.bundled_dir))

    print(f"Syncing {args.url}")
    print(f"  into {settings.data_root / args.local_root}")
    print()

    try:
        result = engine.sync(args.url, args.local_root, ConsoleProgress(color=color))
    except SyncSetupError as e:
        print(f"\nSync could not start: {e}")
        return EXIT_SETUP_ERROR

    print()
    print_summary(result, color=color)

    catalog = CatalogHandle(settings.data_root / args.local_root, settings.bundled_dir).ensure_ready()
    if catalog.total:
        print(f"  Effects available: {len(catalog.male)} male, {len(catalog.female)} female, {len(catalog.both)} both")

    return EXIT_OK if result.ok else EXIT_FAILED_FILES


def main() -> int:
    """Entry point."""
    args = build_parser().parse_args()
    setup_logging(args.verbose)

    tee = None
    if args.log_file:
        tee = TeeOutput(args.log_file)
        sys.stdout = tee
    try:
        return run(args)
    finally:
        if tee:
            sys.stdout = tee.terminal
            tee.close()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(130)
