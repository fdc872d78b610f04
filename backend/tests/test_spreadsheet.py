from datetime import datetime, time
import io

import pandas as pd
import pytest

from conftest import csv_bytes, timetable_row
from schoolhub.core.exceptions import EmptySpreadsheetError, SpreadsheetReadError, UnsupportedFileTypeError
from schoolhub.services.spreadsheet import (
    CSV_CONTENT_TYPE,
    XLS_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    build_template,
    canonical_header,
    cell_to_text,
    extract_rows,
    read_spreadsheet,
    resolve_file_kind,
)


def test_extract_rows_numbers_rows_after_header():
    rows = extract_rows([{"branch": "SCI"}, {"branch": "LIT"}, {"branch": "ART"}])

    assert [row.row_number for row in rows] == [2, 3, 4]
    assert rows[1].get("branch") == "LIT"
    assert rows[1].get("teacher") == ""


def test_extract_rows_rejects_empty_batch():
    with pytest.raises(EmptySpreadsheetError):
        extract_rows([])
    with pytest.raises(EmptySpreadsheetError):
        extract_rows([{"branch": "", "class": None}, {"branch": " "}])


def test_extract_rows_keeps_sheet_position_across_blank_rows():
    rows = extract_rows([{"branch": "SCI"}, {"branch": "", "subject": None}, {"branch": "LIT"}])

    assert [(row.row_number, row.get("branch")) for row in rows] == [(2, "SCI"), (4, "LIT")]


def test_raw_row_values_are_read_only():
    row = extract_rows([{"branch": "SCI"}])[0]
    with pytest.raises(TypeError):
        row.values["branch"] = "LIT"


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Academic Year", "academicYear"),
        ("academicYear", "academicYear"),
        ("START_TIME", "startTime"),
        (" Room Number ", "roomNumber"),
        ("building-name", "buildingName"),
        ("Notes", None),
    ],
)
def test_canonical_header_accepts_human_and_camel_case_headers(header, expected):
    assert canonical_header(header) == expected


def test_cell_to_text_renders_spreadsheet_types():
    assert cell_to_text(None) == ""
    assert cell_to_text(float("nan")) == ""
    assert cell_to_text(204.0) == "204"
    assert cell_to_text(2.5) == "2.5"
    assert cell_to_text(datetime(2024, 9, 2)) == "2024-09-02"
    assert cell_to_text(time(9, 5)) == "09:05"
    assert cell_to_text("  Physics ") == "Physics"


def test_resolve_file_kind_checks_content_type():
    assert resolve_file_kind("plan.csv", CSV_CONTENT_TYPE) == "csv"
    assert resolve_file_kind("plan.xlsx", XLSX_CONTENT_TYPE) == "xlsx"
    assert resolve_file_kind("plan.xls", XLS_CONTENT_TYPE) == "xls"
    assert resolve_file_kind("plan.csv", XLS_CONTENT_TYPE) == "csv"
    with pytest.raises(UnsupportedFileTypeError):
        resolve_file_kind("plan.pdf", "application/pdf")
    with pytest.raises(UnsupportedFileTypeError):
        resolve_file_kind("plan.csv", None)


def test_read_csv_maps_headers_and_keeps_blank_rows_in_place():
    blank = {name: "" for name in timetable_row()}
    content = csv_bytes([timetable_row(), blank, timetable_row(Subject="Chemistry")]) + b"\r\n"

    records = read_spreadsheet(content, filename="plan.csv", content_type=CSV_CONTENT_TYPE)
    rows = extract_rows(records)

    assert records[0]["academicYear"] == "2024-25"
    assert records[0]["startTime"] == "09:00"
    assert not any(records[1].values())
    assert [row.row_number for row in rows] == [2, 4]
    assert rows[1].get("subject") == "Chemistry"


def test_read_csv_with_header_only_returns_no_records():
    content = b"Branch,Class,Academic Year\n"
    assert read_spreadsheet(content, filename="plan.csv", content_type=CSV_CONTENT_TYPE) == []


def test_read_xlsx_converts_dates_and_times_to_text():
    frame = pd.DataFrame(
        [
            {
                "branch": "SCI",
                "class": "Grade 10A",
                "academicYear": "2024-25",
                "date": datetime(2024, 9, 2),
                "startTime": time(9, 0),
                "endTime": time(10, 0),
                "roomNumber": 204,
            }
        ]
    )
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, engine="openpyxl")

    records = read_spreadsheet(buffer.getvalue(), filename="plan.xlsx", content_type=XLSX_CONTENT_TYPE)

    assert records == [
        {
            "branch": "SCI",
            "class": "Grade 10A",
            "academicYear": "2024-25",
            "date": "2024-09-02",
            "startTime": "09:00",
            "endTime": "10:00",
            "roomNumber": "204",
        }
    ]


def test_read_spreadsheet_reports_unreadable_workbook():
    with pytest.raises(SpreadsheetReadError):
        read_spreadsheet(b"definitely not a zip archive", filename="plan.xlsx", content_type=XLSX_CONTENT_TYPE)


def test_template_has_data_instructions_and_rules_sheets():
    workbook = pd.read_excel(io.BytesIO(build_template(1000)), sheet_name=None, engine="openpyxl")

    assert list(workbook) == ["Timetable Data", "Field Instructions", "Validation Rules"]
    data = workbook["Timetable Data"]
    assert list(data.columns)[:3] == ["Branch", "Class", "Academic Year"]
    assert len(data) == 3
    rules = workbook["Validation Rules"]
    assert "Maximum 1000 rows per upload for performance" in rules["Description"].tolist()
