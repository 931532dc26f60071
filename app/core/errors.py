"""
Domain errors raised by the service layer and their HTTP translation.
"""
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class WorkspaceError(Exception):
    """Base class for errors a request can be rejected with."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InputError(WorkspaceError):
    """Invalid ids, out-of-range values or a request the current state rejects."""

    status_code = 400


class AuthError(WorkspaceError):
    """Invalid token, or the actor lacks membership or permission."""

    status_code = 403


async def workspace_error_handler(request: Request, exc: WorkspaceError) -> JSONResponse:
    """Translate a domain error into a JSON error response."""
    logger.warning(
        "Request rejected",
        extra={
            "extra_data": {
                "path": request.url.path,
                "status_code": exc.status_code,
                "error": type(exc).__name__,
                "detail": exc.detail,
            }
        }
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
