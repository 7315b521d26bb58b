"""Maps handler results to HTTP responses.

Every response body is a single JSON object (or that object wrapped in a
JSONP callback for the ``js`` format), including failures.
"""

import json
import re
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse, Response

from backend.app.db.context import Caller
from backend.app.handlers.result import Fail, FailureKind, HandlerResult, Ok
from backend.app.utils.logging import StructuredRequestLogger
from backend.app.utils.metrics import PrometheusApiMetrics

STATUS_BY_KIND: dict[FailureKind, int] = {
    FailureKind.bad_request: status.HTTP_400_BAD_REQUEST,
    FailureKind.not_found: status.HTTP_404_NOT_FOUND,
    FailureKind.forbidden: status.HTTP_403_FORBIDDEN,
}

_CALLBACK = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")

_metrics = PrometheusApiMetrics()
_request_logger = StructuredRequestLogger()


def status_for(result: HandlerResult) -> int:
    if isinstance(result, Ok):
        return status.HTTP_200_OK
    return STATUS_BY_KIND[result.kind]


def error_body(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


def body_for(result: HandlerResult) -> dict[str, Any]:
    """JSON object for a result; empty successes render as ``{}``."""
    if isinstance(result, Ok):
        return result.payload or {}

    body = error_body(result.kind.value, result.message)
    if result.payload:
        body.update(result.payload)
    return body


def to_response(
    result: HandlerResult,
    *,
    operation: str,
    caller: Caller,
    fmt: str = "json",
    callback: str | None = None,
) -> Response:
    """Render ``result`` as a JSON (or JSONP) response.

    Args:
        result: Handler outcome
        operation: Operation name for logs and metrics
        caller: Current caller, for structured logs
        fmt: "json" or "js"
        callback: JSONP callback name, honoured only for "js"

    Returns:
        Response with the mapped status code
    """
    jsonp = fmt == "js" and bool(callback)
    if jsonp and not _CALLBACK.match(callback or ""):
        result = Fail(FailureKind.bad_request, "Invalid callback name")
        jsonp = False

    status_code = status_for(result)
    body = body_for(result)

    _metrics.record_response(operation, status_code)
    if isinstance(result, Fail):
        if result.kind in (FailureKind.not_found, FailureKind.forbidden):
            _metrics.inc_denial(operation, result.kind.value)
        _request_logger.log_outcome(operation, caller, status_code, reason=result.message)
    else:
        _request_logger.log_outcome(operation, caller, status_code)

    if jsonp:
        return Response(
            content=f"{callback}({json.dumps(body)});",
            status_code=status_code,
            media_type="application/javascript",
        )

    return JSONResponse(content=body, status_code=status_code)
