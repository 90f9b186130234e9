from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TypeAlias, Union

from csv2sheet.utils import error_log_path, resolve_delimiter

# Basic Types
FilePath = Union[Path, str]

# One parsed source record, quotation marks already removed
Record: TypeAlias = List[str]

DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class AppendSession:
    """
    The configuration of one append run.

    Attributes:
        source_path: The delimited-text file to read records from.
        template_path: The existing spreadsheet document (XLSX/XLSM/XLTX/XLTM).
        sheet_name: The name of the existing sheet receiving the rows.
        output_path: Where the updated document is saved.
        delimiter: The resolved field separator (a single character).
        start_line: 1-based number of the first parsed record to append.
                    0 and 1 both mean "from the first record".
        encoding: Source encoding, or "auto" to detect it with charset-normalizer.
        max_field_size: Longest accepted field in characters. Longer fields make
                        the line unparseable. None keeps the interpreter default.
    """

    source_path: Path
    template_path: Path
    sheet_name: str
    output_path: Path
    delimiter: str = ","
    start_line: int = 1
    encoding: str = DEFAULT_ENCODING
    max_field_size: Optional[int] = None

    @classmethod
    def create(
        cls,
        source_path: FilePath,
        template_path: FilePath,
        sheet_name: str,
        output_path: FilePath,
        *,
        delimiter: str = "csv",
        start_line: int = 1,
        encoding: str = DEFAULT_ENCODING,
        max_field_size: Optional[int] = None,
    ) -> "AppendSession":
        """Builds a session from user-facing values, resolving the delimiter token."""
        if max_field_size is not None and max_field_size < 1:
            raise ValueError("max_field_size must be a positive integer.")
        return cls(
            source_path=Path(source_path),
            template_path=Path(template_path),
            sheet_name=sheet_name,
            output_path=Path(output_path),
            delimiter=resolve_delimiter(delimiter),
            start_line=start_line,
            encoding=encoding,
            max_field_size=max_field_size,
        )

    @property
    def log_path(self) -> Path:
        return error_log_path(self.output_path)


@dataclass(frozen=True)
class SheetGeometry:
    """
    Where and how wide rows can be appended to the target sheet.

    Attributes:
        column_capacity: Widest record that fits. Taken from the sheet's first row,
                         or the capacity sentinel when the sheet is empty.
        next_row: 1-based index of the first free row.
    """

    column_capacity: int
    next_row: int


@dataclass
class RunSummary:
    """
    Represents the result of an append run.

    Attributes:
        output_path: The path of the saved document.
        sheet_name: The sheet that received the rows.
        accepted_count: Records that survived parsing and the start offset.
        unparseable_count: Source lines the reader rejected.
        rejected_count: Accepted records wider than the sheet.
        skipped_count: Records before the start offset.
        written_count: Records written to the sheet.
        log_path: The diagnostic log, or None when no failure occurred.
    """

    output_path: Path
    sheet_name: str
    accepted_count: int = 0
    unparseable_count: int = 0
    rejected_count: int = 0
    skipped_count: int = 0
    written_count: int = 0
    log_path: Optional[Path] = None

    @property
    def failure_count(self) -> int:
        return self.unparseable_count + self.rejected_count
