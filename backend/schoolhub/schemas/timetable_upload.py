from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from schoolhub.models.timetable_upload import UploadStatus


class RowErrorCode(str, Enum):
    missing_required_field = "missing_required_field"
    unresolved_reference = "unresolved_reference"
    invalid_date_format = "invalid_date_format"
    date_out_of_range = "date_out_of_range"
    invalid_time_format = "invalid_time_format"
    invalid_time_order = "invalid_time_order"
    invalid_status = "invalid_status"
    schedule_conflict_persisted = "schedule_conflict_persisted"
    schedule_conflict_batch = "schedule_conflict_batch"
    persistence_failure = "persistence_failure"


class RowError(BaseModel):
    """One problem found in one spreadsheet row. `row` is the 1-based sheet row (header is row 1)."""

    row: int = Field(ge=2)
    field: str
    message: str
    value: Any | None = None
    code: RowErrorCode


class ValidationSummary(BaseModel):
    totalRows: int = Field(ge=0)
    validRows: int = Field(ge=0)
    errorRows: int = Field(ge=0)
    errors: list[RowError] = Field(default_factory=list)
    canProceed: bool


class ImportResults(BaseModel):
    totalRows: int = Field(ge=0)
    successRows: int = Field(ge=0)
    errorRows: int = Field(ge=0)
    errors: list[RowError] = Field(default_factory=list)


class ValidationResponse(BaseModel):
    uploadId: str
    validation: ValidationSummary


class ImportResponse(BaseModel):
    message: str = "Bulk upload completed"
    uploadId: str
    results: ImportResults


class TimetableBulkUploadOut(BaseModel):
    id: str
    file_name: str
    original_name: str
    uploaded_by: str
    validate_only: bool
    status: UploadStatus
    total_rows: int
    processed_rows: int
    success_rows: int
    error_rows: int
    errors: list[dict]
    created_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}
