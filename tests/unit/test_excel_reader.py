from __future__ import annotations

from pathlib import Path

import pytest

from tariff_refdata.excel.reader import SheetFormatError, check_sheet_shape, read_workbook


def test_read_workbook_returns_header_and_rows(make_workbook, voc_rows):
    path = make_workbook(voc_rows, "voc.xlsx")
    rows = read_workbook(path)
    assert rows[0] == ["Code SH", "Désignation", "Observation", "Exempté"]
    assert len(rows) == 4
    assert rows[1][0] == "1901901000"
    # Blank cell -> None
    assert rows[2][2] is None


def test_read_workbook_keeps_na_like_strings(make_workbook):
    path = make_workbook([["Code SH", "Désignation", "Observation"], ["1", "x", "N/A"]])
    rows = read_workbook(path)
    assert rows[1][2] == "N/A"


def test_read_workbook_from_bytes(make_workbook, tarifport_rows):
    path = make_workbook(tarifport_rows)
    rows = read_workbook(path.read_bytes())
    assert rows[1][0] == "Redevance portuaire"


def test_read_workbook_unreadable_file(temp_workdir: Path):
    bogus = temp_workdir / "data" / "broken.xlsx"
    bogus.write_bytes(b"not a workbook")
    with pytest.raises(SheetFormatError, match="Unable to read spreadsheet"):
        read_workbook(bogus)


def test_check_sheet_shape_requires_data_row():
    with pytest.raises(SheetFormatError, match="header row and at least one data row"):
        check_sheet_shape([["Code SH", "Désignation"]])
    with pytest.raises(SheetFormatError):
        check_sheet_shape([])
    check_sheet_shape([["Code SH"], ["1"]])
