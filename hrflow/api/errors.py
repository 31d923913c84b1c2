"""Error handling: map workflow exceptions to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hrflow.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from hrflow.observability.tracing import log_event, new_trace_id

# Most specific first: IllegalTransitionError is also a ValidationError
_STATUS_BY_ERROR: list[tuple[type[WorkflowError], int]] = [
    (IllegalTransitionError, 422),
    (ValidationError, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConflictError, 409),
]


def status_for(exc: WorkflowError) -> int:
    for error_type, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return http_status
    return 500


async def handle_workflow_errors(request: Request, exc: WorkflowError) -> JSONResponse:
    """
    Convert a workflow exception into a JSON error response.

    Maps exception types to HTTP status codes:
    - ValidationError -> 400 Bad Request
    - IllegalTransitionError -> 422 Unprocessable Entity
    - NotFoundError -> 404 Not Found
    - AuthenticationError -> 401 Unauthorized
    - AuthorizationError -> 403 Forbidden
    - ConflictError -> 409 Conflict (with the request's current status)
    """
    http_status = status_for(exc)
    error_response = {
        "detail": str(exc),
        "error_type": type(exc).__name__,
    }
    if isinstance(exc, ConflictError) and exc.current_status is not None:
        # Clients re-render from this instead of offering the decision again
        error_response["current_status"] = exc.current_status

    log_event(
        "api.error",
        level="warning",
        trace_id=new_trace_id(),
        http_status=http_status,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type=type(exc).__name__,
        error_message=str(exc),
    )
    return JSONResponse(status_code=http_status, content=error_response)


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings are client errors (400)."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "loc": list(error["loc"]),
                "msg": error["msg"],
            }
            for error in errors
        ],
        "error_type": "ValidationError",
    }

    log_event(
        "api.error",
        level="warning",
        trace_id=new_trace_id(),
        http_status=400,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type="RequestValidationError",
        error_count=len(errors),
    )
    return JSONResponse(status_code=400, content=error_response)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, handle_workflow_errors)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
