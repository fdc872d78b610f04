from datetime import date, time

import pytest

from schoolhub.models import RecordStatus, TimetableEntry
from schoolhub.models.enums import DayOfWeek
from schoolhub.schemas.timetable_upload import RowErrorCode
from schoolhub.services.timetable_conflicts import ScheduleConflictDetector, intervals_overlap
from schoolhub.services.timetable_validation import ValidatedRow

MONDAY = date(2024, 9, 2)


def slot(school, row_number, start, end, *, status=RecordStatus.active, full_date=MONDAY, school_class=None):
    school_class = school_class or school.grade_10a
    return ValidatedRow(
        row_number=row_number,
        branch_id=school_class.branch_id,
        class_id=school_class.id,
        academic_year_id=school.year.id,
        subject_id=school.physics.id,
        teacher_id=school.john.id,
        full_date=full_date,
        day=DayOfWeek.monday,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        room_number="204",
        status=status,
    )


def store_entry(db, school, start, end, *, status=RecordStatus.active):
    db.add(
        TimetableEntry(
            branch_id=school.science.id,
            class_id=school.grade_10a.id,
            academic_year_id=school.year.id,
            subject_id=school.chemistry.id,
            teacher_id=school.jane.id,
            full_date=MONDAY,
            day=DayOfWeek.monday,
            start_time=time.fromisoformat(start),
            end_time=time.fromisoformat(end),
            room_number="205",
            status=status,
        )
    )
    db.commit()


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (("09:00", "10:00"), ("09:30", "10:30"), True),
        (("09:00", "10:00"), ("10:00", "11:00"), False),
        (("09:00", "12:00"), ("10:00", "11:00"), True),
        (("09:00", "10:00"), ("08:00", "09:00"), False),
    ],
)
def test_intervals_overlap_is_half_open(first, second, expected):
    a = [time.fromisoformat(value) for value in first]
    b = [time.fromisoformat(value) for value in second]
    assert intervals_overlap(a[0], a[1], b[0], b[1]) is expected
    assert intervals_overlap(b[0], b[1], a[0], a[1]) is expected


def test_batch_conflict_is_reported_on_later_row(db, school):
    errors = ScheduleConflictDetector(db).detect(
        [slot(school, 2, "09:00", "10:00"), slot(school, 3, "09:30", "10:30"), slot(school, 4, "10:30", "11:00")]
    )

    assert len(errors) == 1
    assert errors[0].row == 3
    assert errors[0].field == "time"
    assert errors[0].message == "Time conflict with row 2 in upload data"
    assert errors[0].value == "09:30 - 10:30"
    assert errors[0].code == RowErrorCode.schedule_conflict_batch


def test_row_overlapping_several_earlier_rows_gets_one_error_each(db, school):
    errors = ScheduleConflictDetector(db).detect(
        [slot(school, 2, "09:00", "10:00"), slot(school, 3, "10:00", "11:00"), slot(school, 4, "09:30", "10:30")]
    )

    assert [(error.row, error.message) for error in errors] == [
        (4, "Time conflict with row 2 in upload data"),
        (4, "Time conflict with row 3 in upload data"),
    ]


def test_rows_in_different_classes_or_dates_do_not_conflict(db, school):
    errors = ScheduleConflictDetector(db).detect(
        [
            slot(school, 2, "09:00", "10:00"),
            slot(school, 3, "09:00", "10:00", school_class=school.grade_9b),
            slot(school, 4, "09:00", "10:00", full_date=date(2024, 9, 3)),
        ]
    )
    assert errors == []


def test_persisted_conflict_names_subject_and_teacher(db, school):
    store_entry(db, school, "09:00", "10:00")
    store_entry(db, school, "09:30", "10:30")

    errors = ScheduleConflictDetector(db).detect([slot(school, 2, "09:45", "10:15")])

    assert len(errors) == 1
    assert errors[0].message == "Time conflict with existing timetable: Chemistry by Jane Doe"
    assert errors[0].code == RowErrorCode.schedule_conflict_persisted


def test_inactive_rows_and_entries_are_ignored(db, school):
    store_entry(db, school, "09:00", "10:00", status=RecordStatus.inactive)

    errors = ScheduleConflictDetector(db).detect(
        [slot(school, 2, "09:00", "10:00"), slot(school, 3, "09:00", "10:00", status=RecordStatus.inactive)]
    )
    assert errors == []
