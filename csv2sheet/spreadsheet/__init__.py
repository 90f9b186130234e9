from .base import MAX_COLUMNS, MAX_ROWS, SpreadsheetDocument, coordinates_to_cell_name
from .openpyxl_document import OpenpyxlDocument

__all__ = [
    "MAX_COLUMNS",
    "MAX_ROWS",
    "SpreadsheetDocument",
    "OpenpyxlDocument",
    "coordinates_to_cell_name",
]
