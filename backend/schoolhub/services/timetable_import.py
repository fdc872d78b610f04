"""Bulk timetable import: the pipeline behind the spreadsheet upload endpoint.

An upload moves PROCESSING -> COMPLETED | FAILED exactly once. Validation and
conflict errors are fatal to the whole batch and prevent any write. In commit
mode each entry is written in its own transaction, so one failed insert does
not undo its siblings; such a batch ends FAILED with the other rows stored.
"""
from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import PurePath
import time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schoolhub.core.config import get_settings
from schoolhub.core.exceptions import (
    ResourceNotFoundError,
    TimetableImportRejected,
    TooManyRowsError,
    UploadRejectedError,
    UploadTooLargeError,
)
from schoolhub.models.timetable import TimetableEntry
from schoolhub.models.timetable_upload import TimetableBulkUpload, UploadStatus
from schoolhub.schemas.timetable_upload import (
    ImportResponse,
    ImportResults,
    RowError,
    RowErrorCode,
    ValidationResponse,
    ValidationSummary,
)
from schoolhub.services.audit import log_upload_finished
from schoolhub.services.reference_data import SnapshotResolver, load_reference_snapshot
from schoolhub.services.spreadsheet import RawRow, extract_rows, read_spreadsheet, resolve_file_kind
from schoolhub.services.timetable_conflicts import ScheduleConflictDetector
from schoolhub.services.timetable_validation import ValidatedRow, validate_rows

logger = logging.getLogger(__name__)


def create_upload_job(db: Session, *, original_name: str, uploaded_by: str, validate_only: bool) -> TimetableBulkUpload:
    upload = TimetableBulkUpload(
        file_name=f"{int(time.time() * 1000)}-{original_name}",
        original_name=original_name,
        uploaded_by=uploaded_by,
        validate_only=validate_only,
        status=UploadStatus.processing,
    )
    db.add(upload)
    db.commit()
    db.refresh(upload)
    return upload


def _finalize(
    db: Session,
    upload: TimetableBulkUpload,
    *,
    status: UploadStatus,
    processed_rows: int,
    success_rows: int,
    error_rows: int,
    errors: list[dict],
) -> None:
    upload.status = status
    upload.processed_rows = processed_rows
    upload.success_rows = success_rows
    upload.error_rows = error_rows
    upload.errors = errors
    upload.completed_at = datetime.now(timezone.utc)
    log_upload_finished(db, upload)
    db.commit()
    logger.info(
        "Timetable upload %s finished as %s (%d rows, %d ok, %d with errors)",
        upload.id,
        status.value,
        upload.total_rows,
        success_rows,
        error_rows,
    )


def fail_upload_job(db: Session, upload: TimetableBulkUpload, *, message: str) -> None:
    _finalize(
        db,
        upload,
        status=UploadStatus.failed,
        processed_rows=0,
        success_rows=0,
        error_rows=0,
        errors=[{"message": message}],
    )


def _dump(errors: list[RowError]) -> list[dict]:
    return [error.model_dump(mode="json") for error in errors]


def _create_entries(db: Session, rows: list[ValidatedRow]) -> tuple[int, list[RowError]]:
    success_count = 0
    creation_errors: list[RowError] = []
    for row in rows:
        db.add(
            TimetableEntry(
                branch_id=row.branch_id,
                class_id=row.class_id,
                academic_year_id=row.academic_year_id,
                subject_id=row.subject_id,
                teacher_id=row.teacher_id,
                full_date=row.full_date,
                day=row.day,
                start_time=row.start_time,
                end_time=row.end_time,
                room_number=row.room_number,
                building_name=row.building_name,
                status=row.status,
                is_recurring=False,
            )
        )
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            reason = getattr(exc, "orig", None) or exc
            logger.warning("Failed to create timetable entry for row %d: %s", row.row_number, reason)
            creation_errors.append(
                RowError(
                    row=row.row_number,
                    field="creation",
                    message=f"Failed to create timetable entry: {reason}",
                    code=RowErrorCode.persistence_failure,
                )
            )
            continue
        success_count += 1
    return success_count, creation_errors


def run_import_pipeline(
    db: Session,
    upload: TimetableBulkUpload,
    rows: list[RawRow],
    *,
    validate_only: bool,
) -> ValidationResponse | ImportResponse:
    total_rows = len(rows)
    snapshot = load_reference_snapshot(db)
    outcome = validate_rows(rows, SnapshotResolver(snapshot))
    conflict_errors = ScheduleConflictDetector(db).detect(outcome.valid_rows)
    all_errors = outcome.errors + conflict_errors
    error_rows = len({error.row for error in all_errors})
    logger.info(
        "Timetable upload %s validated: %d rows, %d passed row checks, %d errors on %d rows",
        upload.id,
        total_rows,
        len(outcome.valid_rows),
        len(all_errors),
        error_rows,
    )

    if validate_only:
        _finalize(
            db,
            upload,
            status=UploadStatus.failed if all_errors else UploadStatus.completed,
            processed_rows=total_rows,
            success_rows=total_rows - error_rows,
            error_rows=error_rows,
            errors=_dump(all_errors),
        )
        return ValidationResponse(
            uploadId=upload.id,
            validation=ValidationSummary(
                totalRows=total_rows,
                validRows=total_rows - error_rows,
                errorRows=error_rows,
                errors=all_errors,
                canProceed=not all_errors,
            ),
        )

    if all_errors:
        _finalize(
            db,
            upload,
            status=UploadStatus.failed,
            processed_rows=total_rows,
            success_rows=0,
            error_rows=error_rows,
            errors=_dump(all_errors),
        )
        raise TimetableImportRejected(upload.id, _dump(all_errors))

    success_count, creation_errors = _create_entries(db, outcome.valid_rows)
    _finalize(
        db,
        upload,
        status=UploadStatus.failed if creation_errors else UploadStatus.completed,
        processed_rows=total_rows,
        success_rows=success_count,
        error_rows=len(creation_errors),
        errors=_dump(creation_errors),
    )
    return ImportResponse(
        uploadId=upload.id,
        results=ImportResults(
            totalRows=total_rows,
            successRows=success_count,
            errorRows=len(creation_errors),
            errors=creation_errors,
        ),
    )


def process_timetable_upload(
    db: Session,
    *,
    uploaded_by: str,
    filename: str | None,
    content_type: str | None,
    content: bytes,
    validate_only: bool,
) -> ValidationResponse | ImportResponse:
    settings = get_settings()
    resolve_file_kind(filename, content_type)
    if len(content) > settings.timetable_upload_max_bytes:
        raise UploadTooLargeError(len(content), settings.timetable_upload_max_bytes)

    original_name = PurePath(filename or "").name or "upload"
    upload = create_upload_job(db, original_name=original_name, uploaded_by=uploaded_by, validate_only=validate_only)
    logger.info(
        "Timetable upload %s started by %s (%s, validate_only=%s)", upload.id, uploaded_by, original_name, validate_only
    )

    try:
        rows = extract_rows(read_spreadsheet(content, filename=filename, content_type=content_type))
        if len(rows) > settings.timetable_upload_max_rows:
            raise TooManyRowsError(len(rows), settings.timetable_upload_max_rows)
        upload.total_rows = len(rows)
        db.commit()
        return run_import_pipeline(db, upload, rows, validate_only=validate_only)
    except TimetableImportRejected:
        raise
    except UploadRejectedError as exc:
        fail_upload_job(db, upload, message=exc.message)
        raise
    except Exception as exc:
        logger.exception("Timetable upload %s failed unexpectedly", upload.id)
        db.rollback()
        fail_upload_job(db, upload, message=str(exc) or exc.__class__.__name__)
        raise


def get_upload(db: Session, upload_id: str) -> TimetableBulkUpload:
    upload = db.get(TimetableBulkUpload, upload_id)
    if upload is None:
        raise ResourceNotFoundError("Timetable upload", upload_id)
    return upload


def list_recent_uploads(db: Session, *, uploaded_by: str, limit: int) -> list[TimetableBulkUpload]:
    query = (
        select(TimetableBulkUpload)
        .where(TimetableBulkUpload.uploaded_by == uploaded_by)
        .order_by(TimetableBulkUpload.created_at.desc(), TimetableBulkUpload.file_name.desc())
        .limit(limit)
    )
    return list(db.execute(query).scalars())
