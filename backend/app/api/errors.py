"""Exception handlers keeping framework-level failures in the JSON error shape."""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.api.responses import error_body
from backend.app.utils.logging import get_logger

logger = get_logger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(
        "HTTP exception",
        extra={
            "structured": {
                "status": exc.status_code,
                "detail": exc.detail,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )
    code = "unauthorized" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed path or query values are client errors like any other bad_request."""
    field_errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        "Validation error",
        extra={
            "structured": {
                "field_errors": field_errors,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )
    body = error_body("bad_request", "Request validation failed")
    body["error"]["details"] = {"field_errors": field_errors}
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Internal error",
        extra={
            "structured": {
                "exception_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            }
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
    )
