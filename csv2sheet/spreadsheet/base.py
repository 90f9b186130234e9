from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

MAX_ROWS = 1048576
MAX_COLUMNS = 16384


def col_index_to_letter(col_index: int) -> str:
    """Convert a 1-based column index to column letters (e.g., 1 -> 'A', 28 -> 'AB').

    Args:
        col_index: 1-based column index

    Returns:
        Column letters in A1 notation
    """
    if col_index < 1 or col_index > MAX_COLUMNS:
        raise ValueError(f"Column index must be between 1 and {MAX_COLUMNS}")

    letters = ""
    while col_index > 0:
        col_index, remainder = divmod(col_index - 1, 26)
        letters = chr(ord("A") + remainder) + letters

    return letters


def coordinates_to_cell_name(column: int, row: int) -> str:
    """Convert 1-based (column, row) coordinates to an A1 cell reference (e.g., (2, 3) -> 'B3')."""
    if row < 1 or row > MAX_ROWS:
        raise ValueError(f"Row index must be between 1 and {MAX_ROWS}")
    return f"{col_index_to_letter(column)}{row}"


class SpreadsheetDocument(ABC):
    """Abstract base class for the spreadsheet documents rows are appended to.

    Concrete implementations wrap a specific spreadsheet library. Instances
    are context managers; leaving the block releases the loaded document.
    """

    @classmethod
    @abstractmethod
    def open(cls, path: Union[str, Path]) -> "SpreadsheetDocument":
        """Load a document from disk.

        Raises:
            DocumentOpenError: If the file is missing or is not a valid document.
        """
        pass

    @abstractmethod
    def sheet_names(self) -> List[str]:
        """Names of all sheets, in workbook order."""
        pass

    @abstractmethod
    def get_sheet_index(self, sheet_name: str) -> int:
        """0-based position of a sheet.

        Raises:
            SheetNotFoundError: If no sheet has that exact name.
        """
        pass

    @abstractmethod
    def set_active_sheet(self, index: int) -> None:
        """Make the sheet at the 0-based `index` the one shown on opening."""
        pass

    @abstractmethod
    def get_rows(self, sheet_name: str) -> List[List[str]]:
        """Read a sheet as a matrix of strings.

        Rows run from row 1 to the last row holding a value. Each row runs
        from column A to its last non-empty cell, so rows can differ in length.

        Raises:
            SheetReadError: If the sheet cannot be read.
        """
        pass

    @abstractmethod
    def set_cell_value(self, sheet_name: str, coordinate: str, value: str) -> None:
        """Store a literal value in a cell given in A1 notation (e.g., 'B3')."""
        pass

    @abstractmethod
    def save_as(self, path: Union[str, Path]) -> None:
        """Write the document to `path`.

        Raises:
            SaveError: If the file cannot be written.
        """
        pass

    def close(self) -> None:
        pass

    def has_sheet(self, sheet_name: str) -> bool:
        return sheet_name in self.sheet_names()

    def __enter__(self) -> "SpreadsheetDocument":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
