"""
Progress Display Module

Console output for the phases of a run and for each copied file.

Security Requirements:
- No credential exposure in output
- Paths are printed as given, never expanded
"""

import logging
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class ProgressStage(Enum):
    """Progress stage indicators."""

    STARTED = "started"
    FILE = "file"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProgressUpdate:
    """One line of progress output."""

    stage: ProgressStage
    message: str
    timestamp: float


class ProgressDisplay:
    """
    Phase and per-file progress for a transfer run.

    Example:
        >>> progress = ProgressDisplay()
        >>> progress.start_phase("Connecting to target")
        >>> progress.file_transferred("/a/b/x.txt", "/out/x.txt")
        >>> progress.complete(success=True, message="Transferred 1 files")
    """

    SYMBOLS = {
        ProgressStage.STARTED: "►",
        ProgressStage.FILE: " ",
        ProgressStage.COMPLETED: "✓",
        ProgressStage.FAILED: "✗",
    }

    # Fallback for terminals without Unicode
    ASCII_SYMBOLS = {
        ProgressStage.STARTED: ">",
        ProgressStage.FILE: " ",
        ProgressStage.COMPLETED: "OK",
        ProgressStage.FAILED: "FAIL",
    }

    def __init__(self, use_unicode: bool = True, output_file: Optional[TextIO] = None):
        self.use_unicode = use_unicode
        self.output_file = output_file or sys.stdout
        self.start_time = time.time()
        self.updates: list[ProgressUpdate] = []

    def start_phase(self, name: str) -> None:
        self._emit(ProgressStage.STARTED, name)

    def file_transferred(self, source: str, destination: str) -> None:
        """Record one completed copy."""
        self._emit(ProgressStage.FILE, f"{source} >> {destination}")

    def complete(self, success: bool = True, message: Optional[str] = None) -> None:
        """
        Print the closing line with elapsed time.

        Args:
            success: Whether the run succeeded
            message: Closing message (default: "Done" or "Failed")
        """
        stage = ProgressStage.COMPLETED if success else ProgressStage.FAILED
        text = message or ("Done" if success else "Failed")
        elapsed = time.time() - self.start_time
        self._emit(stage, f"{text} ({self.format_duration(elapsed)})")

    @staticmethod
    def format_duration(seconds: float) -> str:
        """
        Format duration in human-readable format.

        Returns:
            str: e.g. "4.2s", "2m 30s", "1h 5m"
        """
        if seconds < 60:
            return f"{seconds:.1f}s"
        if seconds < 3600:
            return f"{int(seconds // 60)}m {int(seconds % 60)}s"
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"

    def _emit(self, stage: ProgressStage, message: str) -> None:
        update = ProgressUpdate(stage=stage, message=message, timestamp=time.time())
        self.updates.append(update)

        symbols = self.SYMBOLS if self.use_unicode else self.ASCII_SYMBOLS
        print(f"{symbols[stage]} {message}", file=self.output_file, flush=True)

    def get_updates(self) -> list[ProgressUpdate]:
        return self.updates.copy()
