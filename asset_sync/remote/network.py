"""
Connectivity pre-flight for Asset Sync.
"""

from urllib.parse import urlsplit

import requests


def origin_of(url: str) -> str:
    """scheme://host[:port]/ of a URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/"


def check_network(url: str, timeout: float = 3.0) -> tuple[bool, str | None]:
    """
    Check that the host serving url is reachable. Returns (is_online, error_message).

    Any HTTP response counts as reachable; only transport failures don't.
    """
    try:
        requests.head(origin_of(url), timeout=timeout, allow_redirects=False)
        return True, None
    except requests.ConnectionError:
        return False, "No internet connection"
    except requests.Timeout:
        return False, "Connection timed out"
    except requests.RequestException as e:
        return False, f"Network error: {e}"
