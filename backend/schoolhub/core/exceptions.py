class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class UploadRejectedError(AppError):
    """Raised when an uploaded file cannot be processed at all (batch-level failure)."""
    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        super().__init__(message, status_code=status_code, details=details)

class UnsupportedFileTypeError(UploadRejectedError):
    def __init__(self, content_type: str | None):
        super().__init__(
            "Invalid file type. Please upload Excel (.xlsx, .xls) or CSV file",
            details={"contentType": content_type},
        )

class UploadTooLargeError(UploadRejectedError):
    def __init__(self, size: int, max_bytes: int):
        super().__init__(
            f"File is too large ({size} bytes). Maximum allowed is {max_bytes} bytes.",
            status_code=413,
        )

class SpreadsheetReadError(UploadRejectedError):
    """Raised when the spreadsheet library cannot parse the uploaded file."""

class EmptySpreadsheetError(UploadRejectedError):
    def __init__(self):
        super().__init__("File is empty or has no valid data")

class TooManyRowsError(UploadRejectedError):
    def __init__(self, row_count: int, max_rows: int):
        super().__init__(f"File has {row_count} data rows. Maximum allowed is {max_rows} rows per upload.")

class TimetableImportRejected(AppError):
    """Raised in commit mode when any row failed validation or conflict detection."""
    def __init__(self, upload_id: str, errors: list[dict]):
        super().__init__(
            "Validation failed",
            status_code=400,
            details={"uploadId": upload_id, "errors": errors},
        )
