from pathlib import Path

import pandas as pd
import pytest

from csv2sheet.appender import SheetAppender
from csv2sheet.exceptions import (
    DocumentOpenError,
    SheetCapacityError,
    SheetNotFoundError,
    SourceOpenError,
)
from csv2sheet.spreadsheet import MAX_ROWS
from csv2sheet.summary import summarize
from csv2sheet.types import AppendSession, RunSummary


def _read_sheet(path: Path, sheet_name: str):
    """Helper to read a whole sheet as a list of string rows ('' for empty cells)."""
    df = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=str, engine="openpyxl")
    return df.fillna("").values.tolist()


def test_append_to_empty_sheet(create_text_file, create_workbook, tmp_path: Path):
    source = create_text_file("data.csv", "a,b\n1,2,3\nx,y\n")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(source, template, "Data", output)
    summary = SheetAppender().append(session)

    assert output.exists()
    assert _read_sheet(output, "Data") == [
        ["a", "b", ""],
        ["1", "2", "3"],
        ["x", "y", ""],
    ]
    assert summary.accepted_count == 3
    assert summary.written_count == 3
    assert summary.failure_count == 0
    assert summary.log_path is None
    assert not (tmp_path / "out-errors.log").exists()


def test_append_after_existing_rows(create_text_file, create_workbook, tmp_path: Path):
    source = create_text_file("data.csv", "3,Carol\n4,Dan\n")
    template = create_workbook(
        "template.xlsx", {"Data": [["id", "name"], [1, "Alice"], [2, "Bob"]]}
    )
    output = tmp_path / "out.xlsx"

    SheetAppender().append(AppendSession.create(source, template, "Data", output))

    assert _read_sheet(output, "Data") == [
        ["id", "name"],
        ["1", "Alice"],
        ["2", "Bob"],
        ["3", "Carol"],
        ["4", "Dan"],
    ]


def test_too_wide_record_is_rejected_and_leaves_gap(
    create_text_file, create_workbook, read_cells, tmp_path: Path
):
    source = create_text_file("data.csv", "1,2,3\n5,6\n")
    template = create_workbook(
        "template.xlsx", {"Data": [["h1", "h2"], ["a", "b"], ["c", "d"]]}
    )
    output = tmp_path / "out.xlsx"

    summary = SheetAppender().append(AppendSession.create(source, template, "Data", output))

    cells = read_cells(output, "Data")
    assert not any(coordinate.endswith("4") for coordinate in cells)
    assert cells["A5"] == "5"
    assert cells["B5"] == "6"
    assert "C5" not in cells

    log_path = tmp_path / "out-errors.log"
    assert summary.rejected_count == 1
    assert summary.written_count == 1
    assert summary.log_path == log_path
    assert log_path.read_text(encoding="utf-8") == "Not appended (too many fields): 1,2,3\n"


def test_custom_delimiter(create_text_file, create_workbook, read_cells, tmp_path: Path):
    source = create_text_file("data.txt", "a;b;c\n")
    template = create_workbook("template.xlsx", {"Data": [["h1", "h2", "h3"]]})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(source, template, "Data", output, delimiter=";")
    summary = SheetAppender().append(session)

    cells = read_cells(output, "Data")
    assert (cells["A2"], cells["B2"], cells["C2"]) == ("a", "b", "c")
    assert summary.failure_count == 0


def test_start_line_skips_header(create_text_file, create_workbook, tmp_path: Path):
    source = create_text_file("data.tsv", "id\tname\n3\tCarol\n")
    template = create_workbook("template.xlsx", {"Data": [["id", "name"]]})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(
        source, template, "Data", output, delimiter="tab", start_line=2
    )
    summary = SheetAppender().append(session)

    assert _read_sheet(output, "Data") == [["id", "name"], ["3", "Carol"]]
    assert summary.skipped_count == 1
    assert summary.log_path is None


def test_unparseable_and_rejected_share_one_log(
    create_text_file, create_workbook, tmp_path: Path
):
    source = create_text_file("data.csv", "a,b\nabcdefghijkl\nc,d,e\n")
    template = create_workbook("template.xlsx", {"Data": [["h1", "h2"]]})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(source, template, "Data", output, max_field_size=10)
    summary = SheetAppender().append(session)

    assert summary.unparseable_count == 1
    assert summary.rejected_count == 1
    assert summary.failure_count == 2
    assert (tmp_path / "out-errors.log").read_text(encoding="utf-8").splitlines() == [
        "Error reading line: abcdefghijkl",
        "Not appended (too many fields): c,d,e",
    ]
    assert summarize(summary).splitlines()[1] == (
        f"2 lines encountered errors. See the log at {tmp_path / 'out-errors.log'}"
    )


def test_unknown_sheet_is_fatal(create_text_file, create_workbook, tmp_path: Path):
    source = create_text_file("data.csv", "a,b\n")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    with pytest.raises(SheetNotFoundError) as exc_info:
        SheetAppender().append(AppendSession.create(source, template, "Missing", output))

    assert exc_info.value.sheet_name == "Missing"
    assert not output.exists()
    assert not (tmp_path / "out-errors.log").exists()


def test_fatal_error_keeps_and_closes_existing_log(
    create_text_file, create_workbook, tmp_path: Path
):
    source = create_text_file("data.csv", "abcdefghijkl\n")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(source, template, "Missing", output, max_field_size=4)
    with pytest.raises(SheetNotFoundError):
        SheetAppender().append(session)

    assert not output.exists()
    assert (tmp_path / "out-errors.log").read_text(encoding="utf-8") == (
        "Error reading line: abcdefghijkl\n"
    )


def test_missing_source(create_workbook, tmp_path: Path):
    template = create_workbook("template.xlsx", {"Data": []})
    session = AppendSession.create(
        tmp_path / "missing.csv", template, "Data", tmp_path / "out.xlsx"
    )
    with pytest.raises(SourceOpenError, match="Failed to open input file"):
        SheetAppender().append(session)
    assert not (tmp_path / "out.xlsx").exists()


def test_missing_template(create_text_file, tmp_path: Path):
    source = create_text_file("data.csv", "a,b\n")
    session = AppendSession.create(
        source, tmp_path / "missing.xlsx", "Data", tmp_path / "out.xlsx"
    )
    with pytest.raises(DocumentOpenError):
        SheetAppender().append(session)


def test_undecodable_line_is_logged_and_skipped(
    create_text_file, create_workbook, read_cells, tmp_path: Path
):
    source = create_text_file("data.csv", b"a,b\nc,\xe9\nx,y\n")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    summary = SheetAppender().append(AppendSession.create(source, template, "Data", output))

    assert read_cells(output, "Data") == {"A1": "a", "B1": "b", "A2": "x", "B2": "y"}
    assert summary.unparseable_count == 1
    assert summary.written_count == 2
    # The log carries the original bytes of the line
    assert (tmp_path / "out-errors.log").read_bytes() == b"Error reading line: c,\xe9\n"


def test_explicit_encoding(create_text_file, create_workbook, read_cells, tmp_path: Path):
    source = create_text_file("data.csv", "Jürgen;Köln\n", encoding="latin-1")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(
        source, template, "Data", output, delimiter=";", encoding="latin-1"
    )
    SheetAppender().append(session)

    assert read_cells(output, "Data") == {"A1": "Jürgen", "B1": "Köln"}


def test_auto_encoding(create_text_file, create_workbook, read_cells, tmp_path: Path):
    source = create_text_file("data.csv", "名前,都市\n山田,東京\n")
    template = create_workbook("template.xlsx", {"Data": []})
    output = tmp_path / "out.xlsx"

    session = AppendSession.create(source, template, "Data", output, encoding="auto")
    SheetAppender().append(session)

    cells = read_cells(output, "Data")
    assert cells["A2"] == "山田"
    assert cells["B2"] == "東京"


def test_clean_run_removes_stale_log(create_text_file, create_workbook, tmp_path: Path):
    stale_log = tmp_path / "out-errors.log"
    stale_log.write_text("Error reading line: from last week\n", encoding="utf-8")
    source = create_text_file("data.csv", "a,b\n")
    template = create_workbook("template.xlsx", {"Data": []})

    summary = SheetAppender().append(
        AppendSession.create(source, template, "Data", tmp_path / "out.xlsx")
    )

    assert summary.log_path is None
    assert not stale_log.exists()


def test_appends_to_template_and_selects_sheet(
    create_text_file, create_workbook, tmp_path: Path
):
    from openpyxl import load_workbook

    source = create_text_file("prc.csv", "x,1\n")
    template = create_workbook(
        "PfSlicer.xltx", {"Summary": [["total"]], "Pf-Table": [["k", "v"]]}, template=True
    )
    output = tmp_path / "pfoutput.xlsx"

    SheetAppender().append(AppendSession.create(source, template, "Pf-Table", output))

    workbook = load_workbook(output)
    assert workbook.active.title == "Pf-Table"
    assert workbook["Pf-Table"]["A2"].value == "x"
    assert workbook["Summary"]["A1"].value == "total"


class _RecordingDocument:
    """Stands in for a spreadsheet document and records every call."""

    instances = []

    def __init__(self, rows):
        self.rows = rows
        self.writes = []
        self.saved_to = None
        self.closed = False

    @classmethod
    def open(cls, path):
        document = cls([["h1", "h2"]])
        cls.instances.append(document)
        return document

    def get_sheet_index(self, sheet_name):
        return 0

    def set_active_sheet(self, index):
        pass

    def get_rows(self, sheet_name):
        return self.rows

    def set_cell_value(self, sheet_name, coordinate, value):
        self.writes.append((sheet_name, coordinate, value))

    def save_as(self, path):
        self.saved_to = path

    def close(self):
        self.closed = True


def test_pluggable_document_class(create_text_file, tmp_path: Path):
    _RecordingDocument.instances.clear()
    source = create_text_file("data.csv", 'a,"b"\n')

    summary = SheetAppender(document_class=_RecordingDocument).append(
        AppendSession.create(source, tmp_path / "t.xlsx", "Data", tmp_path / "o.xlsx")
    )

    document = _RecordingDocument.instances[0]
    assert document.writes == [("Data", "A2", "a"), ("Data", "B2", "b")]
    assert document.saved_to == tmp_path / "o.xlsx"
    assert document.closed
    assert isinstance(summary, RunSummary)


class _NearlyFullDocument(_RecordingDocument):
    """A sheet whose last used row is the one before the last row of the sheet."""

    @classmethod
    def open(cls, path):
        document = cls([["h1"]] * (MAX_ROWS - 1))
        cls.instances.append(document)
        return document


def test_records_past_the_last_sheet_row_are_fatal(create_text_file, tmp_path: Path):
    _NearlyFullDocument.instances.clear()
    source = create_text_file("data.csv", "a\nb\nc\n")

    with pytest.raises(SheetCapacityError) as exc_info:
        SheetAppender(document_class=_NearlyFullDocument).append(
            AppendSession.create(source, tmp_path / "t.xlsx", "Data", tmp_path / "o.xlsx")
        )

    document = _NearlyFullDocument.instances[0]
    assert exc_info.value.sheet_name == "Data"
    assert exc_info.value.record_count == 3
    assert f"at most {MAX_ROWS} rows" in str(exc_info.value)
    assert document.writes == []
    assert document.saved_to is None
    assert document.closed


def test_record_on_the_last_sheet_row_is_written(create_text_file, tmp_path: Path):
    _NearlyFullDocument.instances.clear()
    source = create_text_file("data.csv", "a\n")

    SheetAppender(document_class=_NearlyFullDocument).append(
        AppendSession.create(source, tmp_path / "t.xlsx", "Data", tmp_path / "o.xlsx")
    )

    document = _NearlyFullDocument.instances[0]
    assert document.writes == [("Data", f"A{MAX_ROWS}", "a")]
