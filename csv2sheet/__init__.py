"""Append delimited text files to existing spreadsheet sheets."""

from .appender import SheetAppender
from .context import RunContext
from .diagnostics import DiagnosticEntry, DiagnosticLogSink, DiagnosticReason
from .exceptions import (
    AppendError,
    DiagnosticLogError,
    DocumentOpenError,
    InvalidDelimiterError,
    SaveError,
    SheetNotFoundError,
    SheetReadError,
    SheetCapacityError,
    SourceOpenError,
)
from .ingest import ingest_records
from .placement import CellWrite, Placement, iter_cell_writes, place_records
from .planner import plan_sheet_geometry
from .summary import summarize
from .types import AppendSession, RunSummary, SheetGeometry
from .utils import resolve_delimiter

__all__ = [
    "SheetAppender",
    "AppendSession",
    "RunSummary",
    "SheetGeometry",
    "RunContext",
    "DiagnosticEntry",
    "DiagnosticLogSink",
    "DiagnosticReason",
    "CellWrite",
    "Placement",
    "resolve_delimiter",
    "ingest_records",
    "plan_sheet_geometry",
    "iter_cell_writes",
    "place_records",
    "summarize",
    "AppendError",
    "InvalidDelimiterError",
    "SourceOpenError",
    "SheetCapacityError",
    "DocumentOpenError",
    "SheetNotFoundError",
    "SheetReadError",
    "SaveError",
    "DiagnosticLogError",
]
