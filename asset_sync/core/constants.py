"""
Shared constants for Asset Sync.
"""

# Remote endpoints (overridable through SyncSettings)
GITHUB_HOST = "github.com"
GITHUB_RAW_HOST = "raw.githubusercontent.com"
DEFAULT_API_ROOT = "https://api.github.com"
DEFAULT_MEDIA_ROOT = "https://media.githubusercontent.com"
DEFAULT_BRANCH = "main"

LISTING_ACCEPT = "application/vnd.github.v3+json"

# Timeouts in seconds
LISTING_TIMEOUT = 30
REQUEST_TIMEOUT = 60
POINTER_TIMEOUT = 120  # media objects can be large

MAX_REDIRECTS = 5
REDIRECT_STATUSES = {301, 302, 303, 307, 308}

# Local files at or below this size are treated as truncated or placeholder
MIN_VALID_SIZE = 200

# Large-file pointer signature
POINTER_SPEC_PREFIX = "version https://git-lfs.github.com/spec/v1"
POINTER_OID_MARKER = "oid sha256:"
POINTER_SIZE_MARKER = "size "
# Pointer texts are ~130 bytes; anything bigger is real content
POINTER_MAX_SIZE = 1024

MANIFEST_EXTENSION = ".json"

# Categorized manifests: "<category>_files" keys, one subfolder per category
CATEGORIES = ("male", "female", "both")
CATEGORY_KEY_SUFFIX = "_files"
FLAT_MANIFEST_KEY = "files"
EFFECTS_FOLDER = "effects"

EFFECT_EXTENSION = ".deepar"

# Temp prefix for in-flight downloads (renamed into place when complete)
PARTIAL_PREFIX = "_download_"

DEFAULT_FILENAME = "download.bin"
