from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
from openpyxl import Workbook, load_workbook

from csv2sheet.context import RunContext


@pytest.fixture
def create_text_file(tmp_path: Path):
    """
    Fixture to create a temporary text file with specified content.
    Content is written as-is (no newline translation) so tests control line endings.
    """

    def _create_text_file(
        file_name: str,
        content: Union[str, bytes],
        encoding: str = "utf-8",
        sub_dir: Optional[str] = None,
    ) -> Path:
        if sub_dir:
            dir_path = tmp_path / sub_dir
            dir_path.mkdir(parents=True, exist_ok=True)
            file_path = dir_path / file_name
        else:
            file_path = tmp_path / file_name

        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            with open(file_path, "w", encoding=encoding, newline="") as f:
                f.write(content)
        return file_path

    return _create_text_file


@pytest.fixture
def create_workbook(tmp_path: Path):
    """
    Fixture to create a temporary Excel file with one sheet per entry of `data_dict`.
    Each value is a list of rows; an empty list leaves the sheet empty.
    """

    def _create_workbook(
        file_name: str,
        data_dict: Dict[str, List[List[object]]],
        template: bool = False,
    ) -> Path:
        file_path = tmp_path / file_name
        workbook = Workbook()
        workbook.remove(workbook.active)
        for sheet_name, rows in data_dict.items():
            worksheet = workbook.create_sheet(title=sheet_name)
            for row in rows:
                worksheet.append(row)
        workbook.template = template
        workbook.save(file_path)
        return file_path

    return _create_workbook


@pytest.fixture
def run_context(tmp_path: Path):
    """A RunContext logging to tmp_path/output-errors.log, closed after the test."""
    with RunContext(tmp_path / "output-errors.log") as context:
        yield context


@pytest.fixture
def read_cells():
    """
    Fixture returning a reader of {coordinate: value} for every non-empty cell of a sheet.
    """

    def _read_cells(path: Path, sheet_name: str) -> Dict[str, object]:
        workbook = load_workbook(path)
        try:
            worksheet = workbook[sheet_name]
            return {
                cell.coordinate: cell.value
                for row in worksheet.iter_rows()
                for cell in row
                if cell.value is not None
            }
        finally:
            workbook.close()

    return _read_cells
