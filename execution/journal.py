"""
Append-only execution journal.

Every swap/bridge message and round-trip summary is appended as one
timestamped line. Writes are fire-and-forget: a failing write is logged and
never interrupts the pipeline.
"""

from pathlib import Path

from core.logging import get_logger
from core.time import now_iso

logger = get_logger(__name__)


class ExecutionJournal:
    """Line-oriented journal file."""

    def __init__(self, path: str | Path | None):
        self.path = Path(path) if path else None

    def append(self, message: str) -> None:
        if self.path is None:
            return
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"[{now_iso()}] {message}\n")
        except OSError as e:
            logger.error(
                f"Journal write failed: {e}",
                extra={"context": {"path": str(self.path)}},
            )

    def read_lines(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
