from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
import re

from dateutil import parser as date_parser

from schoolhub.models.enums import DayOfWeek, RecordStatus
from schoolhub.schemas.timetable_upload import RowError, RowErrorCode
from schoolhub.services.reference_data import ReferenceResolver
from schoolhub.services.spreadsheet import RawRow

REQUIRED_FIELDS = (
    "branch",
    "class",
    "academicYear",
    "subject",
    "teacher",
    "date",
    "startTime",
    "endTime",
    "roomNumber",
)

# 24-hour clock; the leading zero of the hour may be omitted (7:30).
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")

WEEKDAYS = [
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
    DayOfWeek.saturday,
    DayOfWeek.sunday,
]


@dataclass(frozen=True)
class ValidatedRow:
    row_number: int
    branch_id: str
    class_id: str
    academic_year_id: str
    subject_id: str
    teacher_id: str
    full_date: date
    day: DayOfWeek
    start_time: time
    end_time: time
    room_number: str
    building_name: str | None = None
    status: RecordStatus = RecordStatus.active

    @property
    def slot_key(self) -> tuple[str, str, date]:
        return (self.branch_id, self.class_id, self.full_date)

    @property
    def time_range(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


@dataclass
class ValidationOutcome:
    valid_rows: list[ValidatedRow] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


class InvalidRow(Exception):
    """Stops checking the current row; carries the single error that stopped it."""

    def __init__(self, error: RowError):
        super().__init__(error.message)
        self.error = error


def _fail(row: RawRow, name: str, message: str, code: RowErrorCode, value=None) -> InvalidRow:
    return InvalidRow(
        RowError(
            row=row.row_number,
            field=name,
            message=message,
            value=row.get(name) if value is None else value,
            code=code,
        )
    )


def parse_row_date(value: str) -> date:
    """Parse an unambiguous calendar date. ISO `YYYY-MM-DD` is tried first."""
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date_parser.parse(text, default=datetime(1900, 1, 1)).date()
    except (date_parser.ParserError, ValueError, OverflowError) as exc:
        raise ValueError(f"Unparseable date: {value!r}") from exc


def parse_row_time(value: str) -> time | None:
    text = value.strip()
    if not TIME_PATTERN.match(text):
        return None
    hours, minutes = text.split(":")
    return time(int(hours), int(minutes))


def missing_required_fields(row: RawRow) -> list[RowError]:
    return [
        RowError(
            row=row.row_number,
            field=name,
            message=f"{name} is required",
            value=row.values.get(name),
            code=RowErrorCode.missing_required_field,
        )
        for name in REQUIRED_FIELDS
        if not row.get(name).strip()
    ]


def validate_row(row: RawRow, resolver: ReferenceResolver) -> ValidatedRow:
    """Run the ordered checks for one row, raising `InvalidRow` at the first failure."""
    branch = resolver.resolve_branch(row.get("branch"))
    if branch is None:
        raise _fail(row, "branch", "Branch not found", RowErrorCode.unresolved_reference)

    academic_year = resolver.resolve_academic_year(row.get("academicYear"))
    if academic_year is None:
        raise _fail(row, "academicYear", "Academic year not found", RowErrorCode.unresolved_reference)

    school_class = resolver.resolve_class(
        row.get("class"), branch_id=branch.id, academic_year_id=academic_year.id
    )
    if school_class is None:
        raise _fail(
            row, "class", "Class not found in specified branch and academic year", RowErrorCode.unresolved_reference
        )

    subject = resolver.resolve_subject(row.get("subject"))
    if subject is None:
        raise _fail(row, "subject", "Subject not found", RowErrorCode.unresolved_reference)

    teacher = resolver.resolve_teacher(row.get("teacher"), branch_id=branch.id)
    if teacher is None:
        raise _fail(row, "teacher", "Teacher not found in specified branch", RowErrorCode.unresolved_reference)

    try:
        full_date = parse_row_date(row.get("date"))
    except ValueError:
        raise _fail(row, "date", "Invalid date format", RowErrorCode.invalid_date_format) from None
    if not academic_year.start_date <= full_date <= academic_year.end_date:
        raise _fail(row, "date", "Date is outside academic year range", RowErrorCode.date_out_of_range)

    start_time = parse_row_time(row.get("startTime"))
    if start_time is None:
        raise _fail(row, "startTime", "Invalid time format (use HH:MM)", RowErrorCode.invalid_time_format)
    end_time = parse_row_time(row.get("endTime"))
    if end_time is None:
        raise _fail(row, "endTime", "Invalid time format (use HH:MM)", RowErrorCode.invalid_time_format)
    if start_time >= end_time:
        raise _fail(
            row,
            "endTime",
            "End time must be after start time",
            RowErrorCode.invalid_time_order,
            value=f"{row.get('startTime')} - {row.get('endTime')}",
        )

    raw_status = row.get("status").strip().upper() or RecordStatus.active.value
    try:
        status = RecordStatus(raw_status)
    except ValueError:
        raise _fail(row, "status", "Status must be ACTIVE or INACTIVE", RowErrorCode.invalid_status) from None

    return ValidatedRow(
        row_number=row.row_number,
        branch_id=branch.id,
        class_id=school_class.id,
        academic_year_id=academic_year.id,
        subject_id=subject.id,
        teacher_id=teacher.id,
        full_date=full_date,
        # The Day column is informational only.
        day=WEEKDAYS[full_date.weekday()],
        start_time=start_time,
        end_time=end_time,
        room_number=row.get("roomNumber").strip(),
        building_name=row.get("buildingName").strip() or None,
        status=status,
    )


def validate_rows(rows: list[RawRow], resolver: ReferenceResolver) -> ValidationOutcome:
    outcome = ValidationOutcome()
    for row in rows:
        missing = missing_required_fields(row)
        if missing:
            outcome.errors.extend(missing)
            continue
        try:
            outcome.valid_rows.append(validate_row(row, resolver))
        except InvalidRow as exc:
            outcome.errors.append(exc.error)
    return outcome
