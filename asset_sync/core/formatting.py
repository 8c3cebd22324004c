"""
Formatting utilities for Asset Sync.
"""

from pathlib import PurePosixPath


_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_size(size_bytes: int) -> str:
    """Byte count as a short human string ("2.0 KB"). Tops out at PB."""
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_SIZE_UNITS[unit]}"


def format_effect_name(filename: str) -> str:
    """
    Turn an effect filename into a display name.

    "neon_devil_horns.deepar" -> "Neon Devil Horns"
    """
    stem = PurePosixPath(filename).stem
    words = stem.replace("_", " ").split(" ")
    return " ".join(w[:1].upper() + w[1:].lower() for w in words if w)


def effect_id(filename: str) -> str:
    """Stable identifier for an effect file ("Cat Ears.deepar" -> "cat_ears")."""
    return PurePosixPath(filename).stem.lower().replace(" ", "_")


def name_sort_key(name: str) -> str:
    """Sort key for case-insensitive name sorting."""
    return name.casefold()
