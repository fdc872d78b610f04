from __future__ import annotations

from collections import defaultdict
from datetime import date, time
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolhub.models.enums import RecordStatus
from schoolhub.models.subject import Subject
from schoolhub.models.teacher import Teacher
from schoolhub.models.timetable import TimetableEntry
from schoolhub.schemas.timetable_upload import RowError, RowErrorCode
from schoolhub.services.timetable_validation import ValidatedRow

SlotKey = Tuple[str, str, date]


def intervals_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Half-open `[start, end)` overlap, so back-to-back slots do not collide."""
    return start1 < end2 and start2 < end1


class ScheduleConflictDetector:
    """Finds double-booked class slots among validated upload rows.

    Each row is checked against ACTIVE timetable entries already stored for the same
    branch, class and date, and against every other ACTIVE row of the batch sharing
    that key. Rows are grouped by key first so the pairwise scan stays within a group.
    """

    def __init__(self, db: Session):
        self.db = db

    def detect(self, rows: List[ValidatedRow]) -> List[RowError]:
        groups: Dict[SlotKey, List[ValidatedRow]] = defaultdict(list)
        for row in rows:
            if row.status == RecordStatus.active:
                groups[row.slot_key].append(row)

        errors_by_row: Dict[int, List[RowError]] = defaultdict(list)
        for key, group in groups.items():
            existing = self._persisted_entries(key)
            for row in group:
                clash = next(
                    (
                        entry
                        for entry in existing
                        if intervals_overlap(row.start_time, row.end_time, entry[0], entry[1])
                    ),
                    None,
                )
                if clash is not None:
                    _, _, subject_name, first_name, last_name = clash
                    errors_by_row[row.row_number].append(
                        RowError(
                            row=row.row_number,
                            field="time",
                            message=(
                                f"Time conflict with existing timetable: {subject_name} "
                                f"by {first_name} {last_name}"
                            ),
                            value=row.time_range,
                            code=RowErrorCode.schedule_conflict_persisted,
                        )
                    )

            # Report each colliding pair once, on the later row, naming the earlier one.
            for i, later in enumerate(group):
                for earlier in group[:i]:
                    if intervals_overlap(later.start_time, later.end_time, earlier.start_time, earlier.end_time):
                        errors_by_row[later.row_number].append(
                            RowError(
                                row=later.row_number,
                                field="time",
                                message=f"Time conflict with row {earlier.row_number} in upload data",
                                value=later.time_range,
                                code=RowErrorCode.schedule_conflict_batch,
                            )
                        )

        return [error for row_number in sorted(errors_by_row) for error in errors_by_row[row_number]]

    def _persisted_entries(self, key: SlotKey) -> list:
        branch_id, class_id, full_date = key
        query = (
            select(
                TimetableEntry.start_time,
                TimetableEntry.end_time,
                Subject.name,
                Teacher.first_name,
                Teacher.last_name,
            )
            .join(Subject, Subject.id == TimetableEntry.subject_id)
            .join(Teacher, Teacher.id == TimetableEntry.teacher_id)
            .where(
                TimetableEntry.branch_id == branch_id,
                TimetableEntry.class_id == class_id,
                TimetableEntry.full_date == full_date,
                TimetableEntry.status == RecordStatus.active,
            )
            .order_by(TimetableEntry.start_time)
        )
        return list(self.db.execute(query).all())
