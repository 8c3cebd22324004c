"""
Terminal output for the Asset Sync CLI.
"""

from .colors import Colors
from .progress_display import ConsoleProgress, format_summary, print_summary

__all__ = [
    "Colors",
    "ConsoleProgress",
    "format_summary",
    "print_summary",
]
