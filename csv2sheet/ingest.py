import csv
import logging
import re
from typing import Iterable, Iterator, List, Optional

from csv2sheet.context import RunContext
from csv2sheet.diagnostics import DiagnosticEntry, DiagnosticReason
from csv2sheet.types import Record
from csv2sheet.utils import strip_quotes

logger = logging.getLogger(__name__)

# Bytes the source encoding could not decode, as left by errors="surrogateescape"
UNDECODABLE_RE = re.compile("[\udc80-\udcff]")


class _LineTap:
    """Feeds lines to the csv reader and remembers the text of the current record."""

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self._consumed: List[str] = []

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self._consumed.append(line)
        return line

    def take(self) -> str:
        """Returns the text consumed since the last call, without its final line break."""
        raw = "".join(self._consumed)
        self._consumed.clear()
        return raw.rstrip("\r\n")


def ingest_records(
    stream: Iterable[str],
    separator: str,
    start_line: int,
    context: RunContext,
    *,
    max_field_size: Optional[int] = None,
) -> List[Record]:
    """
    Reads delimited records from a text stream.

    Quoting is relaxed: stray quotation marks inside fields never make a line
    fail. A line the reader still rejects (for instance a field longer than
    `max_field_size`) is reported to `context` as an unparseable line and
    skipped. So is a line holding bytes the source encoding could not
    decode, when the stream was opened with ``errors="surrogateescape"``.
    Blank lines produce no record.

    Parsed records are numbered from 0 in reading order; those numbered
    below `start_line - 1` are dropped without being reported. Every kept
    record has all quotation marks removed from its fields.

    Args:
        stream: Text lines, typically a file opened with ``newline=""``.
        separator: The single-character field separator.
        start_line: 1-based number of the first record to keep. 0 and 1 keep everything.
        context: Receives unparseable lines and the skipped count.
        max_field_size: Longest accepted field in characters, for this call only.

    Returns:
        The kept records in source order.
    """
    first_kept_index = max(start_line - 1, 0)
    records: List[Record] = []
    tap = _LineTap(stream)
    reader_options = {"delimiter": separator, "strict": False}
    if separator == '"':
        reader_options.update(quoting=csv.QUOTE_NONE, quotechar=None)
    reader = csv.reader(tap, **reader_options)

    previous_limit = None
    if max_field_size is not None:
        previous_limit = csv.field_size_limit(max_field_size)
    try:
        record_index = 0
        while True:
            try:
                fields = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                raw_line = tap.take()
                logger.debug(f"Could not parse line {reader.line_num}: {e}")
                context.record_failure(
                    DiagnosticEntry(DiagnosticReason.UNPARSEABLE_LINE, raw_line)
                )
                continue
            raw_line = tap.take()
            if UNDECODABLE_RE.search(raw_line):
                logger.debug(f"Undecodable bytes in line {reader.line_num}")
                context.record_failure(
                    DiagnosticEntry(DiagnosticReason.UNPARSEABLE_LINE, raw_line)
                )
                continue

            if not fields:
                continue
            if record_index >= first_kept_index:
                records.append(strip_quotes(fields))
            else:
                context.skipped_count += 1
            record_index += 1
    finally:
        if previous_limit is not None:
            csv.field_size_limit(previous_limit)

    logger.info(
        f"Read {len(records)} records ({context.unparseable_count} unparseable, "
        f"{context.skipped_count} before line {start_line})"
    )
    return records
