from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from io import BytesIO
import math
from pathlib import PurePath
import re
from types import MappingProxyType
from typing import Any, Mapping

import pandas as pd

from schoolhub.core.exceptions import EmptySpreadsheetError, SpreadsheetReadError, UnsupportedFileTypeError

CSV_CONTENT_TYPE = "text/csv"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"

ALLOWED_CONTENT_TYPES = {
    CSV_CONTENT_TYPE: "csv",
    XLSX_CONTENT_TYPE: "xlsx",
    XLS_CONTENT_TYPE: "xls",
}

# Canonical field -> accepted header spellings, compared after `_header_key`.
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "branch": ("branch",),
    "class": ("class", "classname"),
    "academicYear": ("academicyear",),
    "subject": ("subject",),
    "teacher": ("teacher", "teachername"),
    "date": ("date",),
    "day": ("day",),
    "startTime": ("starttime",),
    "endTime": ("endtime",),
    "roomNumber": ("roomnumber", "room"),
    "buildingName": ("buildingname", "building"),
    "status": ("status",),
}

_HEADER_LOOKUP = {alias: canonical for canonical, aliases in HEADER_ALIASES.items() for alias in aliases}
_HEADER_STRIP = re.compile(r"[\s_\-]+")


@dataclass(frozen=True)
class RawRow:
    """A data row as read from the sheet. `row_number` counts the header as row 1."""

    row_number: int
    values: Mapping[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        return self.values.get(name, "")


def _header_key(header: Any) -> str:
    return _HEADER_STRIP.sub("", str(header)).lower()


def canonical_header(header: Any) -> str | None:
    return _HEADER_LOOKUP.get(_header_key(header))


def cell_to_text(value: Any) -> str:
    """Render a cell the way a user typed it: dates as ISO, times as HH:MM, whole floats without `.0`."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if value is pd.NaT:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value).strip()


def resolve_file_kind(filename: str | None, content_type: str | None) -> str:
    kind = ALLOWED_CONTENT_TYPES.get((content_type or "").split(";")[0].strip().lower())
    if kind is None:
        raise UnsupportedFileTypeError(content_type)
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    # Windows browsers label both .xlsx and .csv files as application/vnd.ms-excel.
    if kind == "xls" and suffix in {"xlsx", "csv"}:
        return suffix
    return kind


def read_spreadsheet(content: bytes, *, filename: str | None, content_type: str | None) -> list[dict[str, str]]:
    """Parse the first sheet into records keyed by canonical field name.

    Unknown columns are dropped. Every sheet row after the header yields one record, blank rows
    included, so a record's position still maps to its spreadsheet row.
    """
    kind = resolve_file_kind(filename, content_type)
    try:
        if kind == "csv":
            frame = pd.read_csv(BytesIO(content), dtype=str, keep_default_na=False, skip_blank_lines=False)
        else:
            frame = pd.read_excel(
                BytesIO(content),
                sheet_name=0,
                engine="openpyxl" if kind == "xlsx" else "xlrd",
            )
    except pd.errors.EmptyDataError:
        return []
    except Exception as exc:  # openpyxl, xlrd and the csv parser each raise their own error types
        raise SpreadsheetReadError(f"Unable to read {kind} file: {exc}") from exc

    columns: list[tuple[Any, str]] = []
    for column in frame.columns:
        canonical = canonical_header(column)
        if canonical is not None and canonical not in {name for _, name in columns}:
            columns.append((column, canonical))

    return [
        {canonical: cell_to_text(raw.get(column)) for column, canonical in columns}
        for raw in frame.to_dict(orient="records")
    ]


def extract_rows(records: list[Mapping[str, Any]]) -> list[RawRow]:
    """Number records by sheet position (header is row 1), then drop the all-blank ones."""
    rows = []
    for index, record in enumerate(records):
        values = {key: cell_to_text(value) for key, value in record.items()}
        if any(values.values()):
            rows.append(RawRow(row_number=index + 2, values=MappingProxyType(values)))
    if not rows:
        raise EmptySpreadsheetError()
    return rows


TEMPLATE_COLUMNS: list[tuple[str, int]] = [
    ("Branch", 12),
    ("Class", 15),
    ("Academic Year", 15),
    ("Subject", 20),
    ("Teacher", 20),
    ("Date", 12),
    ("Day", 12),
    ("Start Time", 10),
    ("End Time", 10),
    ("Room Number", 12),
    ("Building Name", 15),
    ("Status", 10),
]

TEMPLATE_SAMPLE_ROWS = [
    ["SCI", "Grade 10A", "2024-2025", "Physics", "John Smith", "2024-09-06", "FRIDAY", "09:00", "10:00", "204", "Science Block", "ACTIVE"],
    ["SCI", "Grade 10A", "2024-2025", "Chemistry", "Jane Doe", "2024-09-06", "FRIDAY", "10:15", "11:15", "205", "Science Block", "ACTIVE"],
    ["LIT", "Grade 9B", "2024-2025", "English Literature", "Alice Johnson", "2024-09-06", "FRIDAY", "11:30", "12:30", "101", "Main Building", "ACTIVE"],
]

FIELD_INSTRUCTIONS = [
    ("Branch", "Branch short name (e.g., SCI) or full name", "Yes", "SCI, Science Branch"),
    ("Class", "Class name as registered in system", "Yes", "Grade 10A, Class 9B"),
    ("Academic Year", "Academic year name", "Yes", "2024-2025, 2023-24"),
    ("Subject", "Subject name as registered in system", "Yes", "Physics, Mathematics"),
    ("Teacher", "Teacher full name (First Last)", "Yes", "John Smith, Jane Doe"),
    ("Date", "Class date in YYYY-MM-DD format", "Yes", "2024-09-06, 2024-12-25"),
    ("Day", "Ignored; the weekday is taken from Date", "No", "FRIDAY"),
    ("Start Time", "Start time in HH:MM format (24-hour)", "Yes", "09:00, 14:30"),
    ("End Time", "End time in HH:MM format (24-hour)", "Yes", "10:00, 15:30"),
    ("Room Number", "Room number or identifier", "Yes", "204, Lab-1, A-101"),
    ("Building Name", "Building name (optional)", "No", "Science Block, Main Building"),
    ("Status", "Timetable status (optional, defaults to ACTIVE)", "No", "ACTIVE, INACTIVE"),
]


def build_template(max_rows: int) -> bytes:
    validation_rules = [
        ("Date Range", "Dates must be within the selected academic year range"),
        ("Time Format", "Use 24-hour format (HH:MM). End time must be after start time"),
        ("No Conflicts", "No time conflicts allowed for same class on same date"),
        ("Valid References", "Branch, class, academic year, subject, and teacher must exist in system"),
        ("Teacher Assignment", "Teacher must be assigned to the specified branch"),
        ("Class Assignment", "Class must belong to the specified branch and academic year"),
        ("File Format", "Supported formats: .xlsx, .xls, .csv"),
        ("Maximum Rows", f"Maximum {max_rows} rows per upload for performance"),
    ]
    sheets = [
        (
            "Timetable Data",
            pd.DataFrame(TEMPLATE_SAMPLE_ROWS, columns=[name for name, _ in TEMPLATE_COLUMNS]),
            [width for _, width in TEMPLATE_COLUMNS],
        ),
        (
            "Field Instructions",
            pd.DataFrame(FIELD_INSTRUCTIONS, columns=["Field", "Description", "Required", "Example"]),
            [15, 40, 10, 25],
        ),
        (
            "Validation Rules",
            pd.DataFrame(validation_rules, columns=["Rule", "Description"]),
            [20, 60],
        ),
    ]

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, frame, widths in sheets:
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            worksheet = writer.sheets[sheet_name]
            for index, width in enumerate(widths):
                letter = worksheet.cell(row=1, column=index + 1).column_letter
                worksheet.column_dimensions[letter].width = width
    return buffer.getvalue()
