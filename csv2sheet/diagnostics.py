import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from csv2sheet.exceptions import DiagnosticLogError

logger = logging.getLogger(__name__)


class DiagnosticReason(enum.Enum):
    """Why a source line or record did not reach the sheet. Values are the log labels."""

    UNPARSEABLE_LINE = "Error reading line"
    FIELD_COUNT_EXCEEDS_CAPACITY = "Not appended (too many fields)"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class DiagnosticEntry:
    reason: DiagnosticReason
    raw_line: str

    def format(self) -> str:
        return f"{self.reason.label}: {self.raw_line}"


class DiagnosticLogSink:
    """
    Append-only text log of per-line failures.

    The file is created (truncating any previous content) on the first
    `write` and never before, so a run without failures leaves no log
    behind. `close` is safe to call more than once.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._handle: Optional[IO[str]] = None
        self._closed = False
        self.entry_count = 0

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def write(self, entry: DiagnosticEntry) -> None:
        if self._closed:
            raise DiagnosticLogError(
                f"Diagnostic log {self.path} is already closed."
            )
        if self._handle is None:
            self._open()
        try:
            self._handle.write(entry.format() + "\n")
        except OSError as e:
            raise DiagnosticLogError(
                f"Failed to write to error log file {self.path}: {e}"
            ) from e
        self.entry_count += 1

    def _open(self) -> None:
        try:
            self._handle = open(
                self.path,
                "w",
                encoding="utf-8",
                errors="surrogateescape",
                newline="\n",
            )
        except OSError as e:
            logger.error(f"Failed to create error log file {self.path}: {e}")
            raise DiagnosticLogError(
                f"Failed to create error log file: {e}"
            ) from e
        logger.debug(f"Created diagnostic log at {self.path}")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._handle is not None:
            try:
                self._handle.close()
            finally:
                self._handle = None
            logger.debug(
                f"Closed diagnostic log {self.path} with {self.entry_count} entries"
            )
