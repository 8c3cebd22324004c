"""
Shared utilities for Asset Sync.
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path

_ANSI = re.compile(r'\x1b\[[0-9;]*[mKHJ]')


class TeeOutput:
    """Write to both stdout and a session log file, without colors or blank lines."""

    def __init__(self, log_path: Path):
        self.terminal = sys.stdout
        self.log_file = open(log_path, "a", encoding="utf-8")
        self._line_buffer = ""
        # Write session header
        self.log_file.write(f"\n{'='*60}\n")
        self.log_file.write(f"Session started: {datetime.now().isoformat()}\n")
        self.log_file.write(f"{'='*60}\n\n")
        self.log_file.flush()

    def write(self, message):
        self.terminal.write(message)
        self._line_buffer += _ANSI.sub('', message)

        # Process complete lines
        while '\n' in self._line_buffer:
            line, self._line_buffer = self._line_buffer.split('\n', 1)
            stripped = line.rstrip()
            if stripped:
                timestamp = datetime.now().strftime("[%H:%M:%S]")
                self.log_file.write(f"{timestamp} {stripped}\n")

        self.log_file.flush()

    def flush(self):
        self.terminal.flush()
        self.log_file.flush()

    def isatty(self) -> bool:
        return self.terminal.isatty()

    def close(self):
        # Flush any remaining buffer
        if self._line_buffer.strip():
            timestamp = datetime.now().strftime("[%H:%M:%S]")
            self.log_file.write(f"{timestamp} {self._line_buffer.rstrip()}\n")
        self.log_file.close()


def setup_logging(verbose: bool = False, stream=None):
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=stream or sys.stderr,
        force=True,
    )
