import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from csv2sheet.context import RunContext
from csv2sheet.diagnostics import DiagnosticEntry, DiagnosticReason
from csv2sheet.spreadsheet.base import coordinates_to_cell_name
from csv2sheet.types import Record, SheetGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellWrite:
    """A single value to store at a 1-based (column, row) position."""

    column: int
    row: int
    value: str

    @property
    def coordinate(self) -> str:
        return coordinates_to_cell_name(self.column, self.row)


@dataclass
class Placement:
    writes: List[CellWrite] = field(default_factory=list)
    written_count: int = 0
    rejected_count: int = 0


def iter_cell_writes(
    records: Sequence[Record],
    geometry: SheetGeometry,
    separator: str,
    context: RunContext,
) -> Iterator[CellWrite]:
    """
    Yields the cell writes for each record, reporting records that are too wide.

    Record i always targets row ``geometry.next_row + i``. A rejected record
    keeps its row slot, so rejections leave empty rows between appended ones.
    Rejected records are logged with their fields joined by `separator`.
    """
    for i, record in enumerate(records):
        if len(record) > geometry.column_capacity:
            context.record_failure(
                DiagnosticEntry(
                    DiagnosticReason.FIELD_COUNT_EXCEEDS_CAPACITY,
                    separator.join(record),
                )
            )
            continue

        row = geometry.next_row + i
        for j, value in enumerate(record):
            yield CellWrite(column=j + 1, row=row, value=value)


def place_records(
    records: Sequence[Record],
    geometry: SheetGeometry,
    separator: str,
    context: RunContext,
) -> Placement:
    """Collects every cell write for `records`; see `iter_cell_writes`."""
    rejected_before = context.rejected_count
    placement = Placement()
    placement.writes = list(iter_cell_writes(records, geometry, separator, context))
    placement.rejected_count = context.rejected_count - rejected_before
    placement.written_count = len(records) - placement.rejected_count
    logger.debug(
        f"Planned {len(placement.writes)} cell writes, {placement.rejected_count} records rejected"
    )
    return placement
