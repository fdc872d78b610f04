from __future__ import annotations

from sqlalchemy.orm import Session

from schoolhub.models.activity_log import ActivityLog
from schoolhub.models.timetable_upload import TimetableBulkUpload

UPLOAD_ACTION = "timetable.bulk_upload"


def log_upload_finished(db: Session, upload: TimetableBulkUpload) -> ActivityLog:
    """Stage the activity record for a finalised upload; the caller's commit persists it."""
    record = ActivityLog(
        user_id=upload.uploaded_by,
        action=UPLOAD_ACTION,
        entity_type=TimetableBulkUpload.__tablename__,
        entity_id=upload.id,
        details={
            "status": upload.status.value,
            "validateOnly": upload.validate_only,
            "fileName": upload.original_name,
            "totalRows": upload.total_rows,
            "successRows": upload.success_rows,
            "errorRows": upload.error_rows,
        },
    )
    db.add(record)
    return record
