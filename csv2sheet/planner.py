import logging
from typing import List, Sequence

from csv2sheet.spreadsheet.base import MAX_COLUMNS
from csv2sheet.types import SheetGeometry

logger = logging.getLogger(__name__)


def plan_sheet_geometry(rows: Sequence[List[str]]) -> SheetGeometry:
    """
    Works out where appended rows go and how wide they may be.

    The first row is the authority on width (it is usually the table header),
    so its cell count is the column capacity. An empty sheet has no such row
    and accepts records of any width up to Excel's column limit. Rows are
    appended directly after the last existing row.
    """
    if rows:
        column_capacity = len(rows[0])
    else:
        column_capacity = MAX_COLUMNS
    geometry = SheetGeometry(column_capacity=column_capacity, next_row=len(rows) + 1)
    logger.info(
        f"Sheet has {len(rows)} rows; appending from row {geometry.next_row} "
        f"with at most {geometry.column_capacity} columns"
    )
    return geometry
