import logging
from pathlib import Path

from csv2sheet.diagnostics import DiagnosticEntry, DiagnosticLogSink, DiagnosticReason

logger = logging.getLogger(__name__)


class RunContext:
    """
    Mutable state of a single append run, handed to each pipeline stage.

    Owns the failure counters and the lazily created diagnostic log. Use it
    as a context manager so the log is closed on every exit path:

        with RunContext(session.log_path) as context:
            records = ingest_records(stream, ",", 1, context)
    """

    def __init__(self, log_path: Path):
        self.sink = DiagnosticLogSink(log_path)
        self.unparseable_count = 0
        self.rejected_count = 0
        self.skipped_count = 0

    @property
    def log_path(self) -> Path:
        return self.sink.path

    @property
    def failure_count(self) -> int:
        return self.unparseable_count + self.rejected_count

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0

    def record_failure(self, entry: DiagnosticEntry) -> None:
        if entry.reason is DiagnosticReason.UNPARSEABLE_LINE:
            self.unparseable_count += 1
        else:
            self.rejected_count += 1
        logger.debug(f"Recorded failure: {entry.format()}")
        self.sink.write(entry)

    def close(self) -> None:
        self.sink.close()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
