from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH"}


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Turns away oversized request bodies, spreadsheet uploads included, before they are read.

    Only the declared Content-Length is checked; the upload pipeline enforces the file cap itself.
    """

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in BODY_METHODS:
            return await call_next(request)

        raw_length = request.headers.get("content-length")
        if not raw_length:
            return await call_next(request)
        try:
            declared = int(raw_length)
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={"message": "Invalid Content-Length header", "details": {}},
            )

        if declared > self._max_bytes:
            logger.warning(
                "Rejected %s %s: body of %d bytes exceeds %d",
                request.method,
                request.url.path,
                declared,
                self._max_bytes,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "message": (
                        f"Request body too large ({declared} bytes). "
                        f"Maximum allowed is {self._max_bytes} bytes."
                    ),
                    "details": {"maxBytes": self._max_bytes},
                },
            )
        return await call_next(request)
