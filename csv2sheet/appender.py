import logging
from pathlib import Path
from typing import List, Type

from csv2sheet.context import RunContext
from csv2sheet.exceptions import SheetCapacityError, SourceOpenError
from csv2sheet.ingest import ingest_records
from csv2sheet.placement import iter_cell_writes
from csv2sheet.planner import plan_sheet_geometry
from csv2sheet.spreadsheet import MAX_ROWS, OpenpyxlDocument, SpreadsheetDocument
from csv2sheet.types import AppendSession, Record, RunSummary
from csv2sheet.utils import detect_file_encoding

logger = logging.getLogger(__name__)

AUTO_ENCODING = "auto"


class SheetAppender:
    """
    Appends the records of a delimited text file to an existing sheet.

    A run goes through parsing, planning, placing and saving. Lines the
    reader rejects and records wider than the sheet are written to the
    diagnostic log next to the output and counted, but never stop the run.
    Anything else (missing source, invalid document, unknown sheet, failed
    save) raises an `AppendError` subclass and no output is written.

    Attributes:
        document_class: The `SpreadsheetDocument` implementation used to open
                        the template. Defaults to `OpenpyxlDocument`.
    """

    def __init__(self, document_class: Type[SpreadsheetDocument] = OpenpyxlDocument):
        self.document_class = document_class

    def append(self, session: AppendSession) -> RunSummary:
        """
        Runs one append and returns its outcome.

        Args:
            session: The run configuration.

        Returns:
            A RunSummary with the record counts. `log_path` is set only when
            at least one line or record failed.

        Raises:
            SourceOpenError: If the source file cannot be opened.
            DocumentOpenError: If the template cannot be loaded.
            SheetNotFoundError: If the target sheet does not exist.
            SheetReadError: If the sheet's rows cannot be read.
            SheetCapacityError: If the records would run past the last sheet row.
            SaveError: If the output cannot be written.
            DiagnosticLogError: If the diagnostic log cannot be created.
        """
        with RunContext(session.log_path) as context:
            records = self._read_records(session, context)

            document = self.document_class.open(session.template_path)
            try:
                written_count = self._write_records(document, session, records, context)
                document.save_as(session.output_path)
            finally:
                document.close()

        if not context.has_failures:
            self._remove_stale_log(session.log_path)

        return RunSummary(
            output_path=session.output_path,
            sheet_name=session.sheet_name,
            accepted_count=len(records),
            unparseable_count=context.unparseable_count,
            rejected_count=context.rejected_count,
            skipped_count=context.skipped_count,
            written_count=written_count,
            log_path=context.log_path if context.has_failures else None,
        )

    def _resolve_encoding(self, session: AppendSession) -> str:
        if session.encoding.lower() != AUTO_ENCODING:
            return session.encoding
        try:
            encoding = detect_file_encoding(session.source_path)
            logger.info(
                f"Auto-detected encoding for {session.source_path.name}: {encoding}"
            )
            return encoding
        except (ValueError, RuntimeError) as e:
            logger.warning(
                f"Encoding detection for {session.source_path.name} failed: {e}. Using fallback 'utf-8'."
            )
            return "utf-8"

    def _read_records(self, session: AppendSession, context: RunContext) -> List[Record]:
        encoding = self._resolve_encoding(session)
        try:
            # Undecodable bytes survive as lone surrogates and are logged per line
            source = open(
                session.source_path,
                encoding=encoding,
                errors="surrogateescape",
                newline="",
            )
        except (OSError, LookupError) as e:
            logger.error(f"Failed to open input file {session.source_path}: {e}")
            raise SourceOpenError(f"Failed to open input file: {e}") from e

        with source:
            return ingest_records(
                source,
                session.delimiter,
                session.start_line,
                context,
                max_field_size=session.max_field_size,
            )

    def _write_records(
        self,
        document: SpreadsheetDocument,
        session: AppendSession,
        records: List[Record],
        context: RunContext,
    ) -> int:
        sheet_index = document.get_sheet_index(session.sheet_name)
        document.set_active_sheet(sheet_index)

        geometry = plan_sheet_geometry(document.get_rows(session.sheet_name))
        last_row = geometry.next_row + len(records) - 1
        if records and last_row > MAX_ROWS:
            logger.error(
                f"Appending {len(records)} records from row {geometry.next_row} would end at row {last_row}"
            )
            raise SheetCapacityError(
                session.sheet_name, geometry.next_row, len(records), MAX_ROWS
            )

        rejected_before = context.rejected_count
        for write in iter_cell_writes(records, geometry, session.delimiter, context):
            document.set_cell_value(session.sheet_name, write.coordinate, write.value)
        written_count = len(records) - (context.rejected_count - rejected_before)
        logger.info(
            f"Wrote {written_count} records to sheet '{session.sheet_name}' from row {geometry.next_row}"
        )
        return written_count

    @staticmethod
    def _remove_stale_log(log_path: Path) -> None:
        if log_path.is_file():
            logger.info(f"Removing diagnostic log left by an earlier run: {log_path}")
            log_path.unlink()
