from datetime import date

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from schoolhub.api.deps import get_db, require_roles
from schoolhub.core.config import get_settings
from schoolhub.models.user import User, UserRole
from schoolhub.schemas.timetable_upload import ImportResponse, TimetableBulkUploadOut, ValidationResponse
from schoolhub.services.spreadsheet import XLSX_CONTENT_TYPE, build_template
from schoolhub.services.timetable_import import get_upload, list_recent_uploads, process_timetable_upload

settings = get_settings()
router = APIRouter()


@router.post("/timetable-bulk-upload", response_model=ValidationResponse | ImportResponse)
def upload_timetable(
    response: Response,
    file: UploadFile = File(...),
    validateOnly: str = Form("false"),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> ValidationResponse | ImportResponse:
    validate_only = validateOnly.strip().lower() in {"true", "1", "yes"}
    content = file.file.read()
    result = process_timetable_upload(
        db,
        uploaded_by=current_user.id,
        filename=file.filename,
        content_type=file.content_type,
        content=content,
        validate_only=validate_only,
    )
    if isinstance(result, ImportResponse):
        response.status_code = status.HTTP_201_CREATED
    return result


@router.get("/timetable-bulk-upload", response_model=list[TimetableBulkUploadOut])
def list_timetable_uploads(
    limit: int = Query(default=settings.timetable_upload_history_limit, ge=1, le=100),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[TimetableBulkUploadOut]:
    return list_recent_uploads(db, uploaded_by=current_user.id, limit=limit)


@router.get("/timetable-bulk-upload/template")
def download_timetable_template(current_user: User = Depends(require_roles(UserRole.admin))) -> Response:
    filename = f"timetable-bulk-upload-template-{date.today().isoformat()}.xlsx"
    return Response(
        content=build_template(settings.timetable_upload_max_rows),
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/timetable-bulk-upload/{upload_id}", response_model=TimetableBulkUploadOut)
def get_timetable_upload(
    upload_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> TimetableBulkUploadOut:
    return get_upload(db, upload_id)
