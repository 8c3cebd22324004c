"""
Console progress display for Asset Sync.

Renders ProgressEvents as one line per step and prints the end-of-pass summary.
"""

import shutil
import sys
from typing import Optional, TextIO

from ..sync.result import SyncResult
from .colors import Colors


class ConsoleProgress:
    """
    Progress callback that prints "  NN.N%  status" lines.

    Repeated identical lines are suppressed.
    """

    def __init__(self, stream: Optional[TextIO] = None, color: bool = True):
        self.stream = stream or sys.stdout
        self.color = color
        self._last_line = None
        self.lines_printed = 0

    def __call__(self, status: str, progress: float, current_item: Optional[str] = None):
        term_width = shutil.get_terminal_size().columns
        core = f"  {progress * 100:5.1f}%"

        remaining = term_width - len(core) - 5
        if self.color:
            core = f"{Colors.PURPLE}{core}{Colors.RESET}"
        if remaining > 10:
            if len(status) > remaining:
                status = status[:remaining - 3] + "..."
            line = f"{core}  {status}"
        else:
            line = core

        if line == self._last_line:
            return
        self._last_line = line
        self.lines_printed += 1
        print(line, file=self.stream)


def format_summary(result: SyncResult, color: bool = True) -> str:
    """Multi-line end-of-pass summary."""
    c = Colors if color else _NoColors
    lines = [
        f"{c.BOLD}Sync complete{c.RESET}",
        f"  {c.GREEN}Downloaded:{c.RESET}      {len(result.downloaded)} files",
        f"  {c.MUTED}Already present:{c.RESET} {len(result.already_present)} files",
    ]
    if result.failed:
        lines.append(f"  {c.RED}Failed:{c.RESET}          {len(result.failed)} files")
        lines.extend(f"    {c.DIM}{name}{c.RESET}" for name in result.failed)
    for category, names in result.by_category.items():
        if names:
            lines.append(f"  {category}: {len(names)} files")
    return "\n".join(lines)


def print_summary(result: SyncResult, stream: Optional[TextIO] = None, color: bool = True):
    print(format_summary(result, color), file=stream or sys.stdout)


class _NoColors:
    RESET = BOLD = DIM = GREEN = RED = MUTED = ""
