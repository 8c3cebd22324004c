"""
Remote-side access: source classification, link normalization, transport,
contents listing, and large-file pointer resolution.
"""

from .models import RepoCoords, RemoteEntry, EntryKind, ContentsListing
from .links import (
    to_direct_url,
    repo_coords_from_url,
    filename_from_url,
    filename_from_content_disposition,
    parse_drive_file_id,
)
from .source import RawFile, BlobFile, Tree, GenericPayload, SourceShape, classify_source
from .transport import Transport, FetchResponse
from .pointer import PointerResolver, PointerInfo, is_pointer, parse_pointer
from .client import ContentsClient
from .network import check_network

__all__ = [
    # Models
    "RepoCoords",
    "RemoteEntry",
    "EntryKind",
    "ContentsListing",
    # Links
    "to_direct_url",
    "repo_coords_from_url",
    "filename_from_url",
    "filename_from_content_disposition",
    "parse_drive_file_id",
    # Source shapes
    "RawFile",
    "BlobFile",
    "Tree",
    "GenericPayload",
    "SourceShape",
    "classify_source",
    # Network
    "Transport",
    "FetchResponse",
    "ContentsClient",
    "check_network",
    # Pointers
    "PointerResolver",
    "PointerInfo",
    "is_pointer",
    "parse_pointer",
]
