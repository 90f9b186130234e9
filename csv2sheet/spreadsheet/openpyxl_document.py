import logging
import warnings
import zipfile
from pathlib import Path
from typing import List, Optional, Union

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.exceptions import InvalidFileException

from csv2sheet.exceptions import (
    DocumentOpenError,
    SaveError,
    SheetNotFoundError,
    SheetReadError,
)
from csv2sheet.spreadsheet.base import SpreadsheetDocument

logger = logging.getLogger(__name__)

# Extensions of macro-enabled documents and of templates
VBA_SUFFIXES = {".xlsm", ".xltm"}
TEMPLATE_SUFFIXES = {".xltx", ".xltm"}


class OpenpyxlDocument(SpreadsheetDocument):
    """Spreadsheet document backed by an openpyxl Workbook.

    Values are always stored as literal text: a string starting with '=' is
    not turned into a formula, and characters that cannot appear in the
    worksheet XML are dropped.
    """

    def __init__(self, workbook: Workbook, path: Optional[Path] = None):
        self.workbook = workbook
        self.path = path

    @classmethod
    def open(cls, path: Union[str, Path]) -> "OpenpyxlDocument":
        path = Path(path)
        if not path.is_file():
            raise DocumentOpenError(f"Failed to open Excel template: {path} not found")
        keep_vba = path.suffix.lower() in VBA_SUFFIXES
        try:
            # openpyxl warns about the parts it cannot keep, such as slicers
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", UserWarning)
                workbook = load_workbook(path, keep_vba=keep_vba)
        except (
            InvalidFileException,
            zipfile.BadZipFile,
            KeyError,
            ValueError,
            OSError,
        ) as e:
            logger.error(f"Error loading workbook '{path}': {e}")
            raise DocumentOpenError(f"Failed to open Excel template: {e}") from e
        for warning in caught:
            logger.warning(f"{path.name}: {warning.message}")
        logger.info(f"Opened workbook {path.name} with sheets {workbook.sheetnames}")
        return cls(workbook, path)

    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def get_sheet_index(self, sheet_name: str) -> int:
        try:
            return self.workbook.sheetnames.index(sheet_name)
        except ValueError:
            raise SheetNotFoundError(sheet_name) from None

    def set_active_sheet(self, index: int) -> None:
        self.workbook.active = index
        # Only the active tab may stay selected, or Excel opens with grouped sheets
        for position, name in enumerate(self.workbook.sheetnames):
            sheet_view = getattr(self.workbook[name], "sheet_view", None)
            if sheet_view is not None:
                sheet_view.tabSelected = position == index

    def _worksheet(self, sheet_name: str):
        if sheet_name not in self.workbook.sheetnames:
            raise SheetNotFoundError(sheet_name)
        return self.workbook[sheet_name]

    def get_rows(self, sheet_name: str) -> List[List[str]]:
        worksheet = self._worksheet(sheet_name)
        rows: List[List[str]] = []
        try:
            for values in worksheet.iter_rows(values_only=True):
                cells = ["" if value is None else str(value) for value in values]
                while cells and cells[-1] == "":
                    cells.pop()
                rows.append(cells)
        except (AttributeError, TypeError, ValueError) as e:
            raise SheetReadError(f"Failed to get rows from sheet: {e}") from e

        while rows and not rows[-1]:
            rows.pop()
        return rows

    def set_cell_value(self, sheet_name: str, coordinate: str, value: str) -> None:
        cell = self._worksheet(sheet_name)[coordinate]
        if isinstance(value, str):
            cleaned = ILLEGAL_CHARACTERS_RE.sub("", value)
            if cleaned != value:
                logger.debug(f"Removed illegal characters from value for {coordinate}")
            value = cleaned
        cell.value = value
        if cell.data_type == "f":
            cell.data_type = "s"

    def save_as(self, path: Union[str, Path]) -> None:
        path = Path(path)
        suffix = path.suffix.lower()
        self.workbook.template = suffix in TEMPLATE_SUFFIXES
        if suffix not in VBA_SUFFIXES and self.workbook.vba_archive is not None:
            logger.warning(
                f"Macros from {self.path.name if self.path else 'the template'} are not kept in {path.name}"
            )
            self.workbook.vba_archive = None
        try:
            self.workbook.save(path)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error saving workbook to '{path}': {e}")
            raise SaveError(f"Failed to save updated Excel file: {e}") from e
        logger.info(f"Saved workbook to {path}")

    def close(self) -> None:
        self.workbook.close()
