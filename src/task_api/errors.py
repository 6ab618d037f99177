from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Key used for problems that belong to the body as a whole rather than a field
BASE_KEY = "base"

_REASONS = {
    "missing": "is required",
    "string_type": "must be a string",
    "bool_type": "must be a boolean",
    "bool_parsing": "must be a boolean",
    "int_type": "must be an integer",
    "int_parsing": "must be an integer",
    "model_type": "must be a JSON object",
    "dict_type": "must be a JSON object",
    "json_invalid": "is not valid JSON",
}


# PUBLIC_INTERFACE
class ValidationFailure(Exception):
    """Request attributes broke one or more field rules."""

    def __init__(self, errors: Mapping[str, List[str]]) -> None:
        super().__init__("validation failed")
        self.errors: Dict[str, List[str]] = {k: list(v) for k, v in errors.items()}


# PUBLIC_INTERFACE
class TaskNotFound(Exception):
    """No task exists for the requested id."""

    def __init__(self, task_id: Any) -> None:
        super().__init__(f"task {task_id!r} not found")
        self.task_id = task_id


# PUBLIC_INTERFACE
class StoreFailure(Exception):
    """The repository failed unexpectedly. The cause is never sent to clients."""


def _reason(err: Mapping[str, Any]) -> str:
    if err.get("type") == "value_error":
        cause = (err.get("ctx") or {}).get("error")
        if cause is not None:
            return str(cause)
    return _REASONS.get(err.get("type", ""), err.get("msg", "is invalid"))


# PUBLIC_INTERFACE
def collect_errors(errors: Iterable[Mapping[str, Any]], skip_prefixes: Iterable[str] = ()) -> Dict[str, List[str]]:
    """
    Fold pydantic/FastAPI error dicts into {field: [reason, ...]}.

    Location prefixes in `skip_prefixes` (e.g. "body", "query") are dropped so
    the first remaining element names the field; an empty or positional
    location maps to BASE_KEY. Duplicate reasons for the same field are reported once.
    """
    prefixes = set(skip_prefixes)
    folded: Dict[str, List[str]] = {}
    for err in errors:
        loc = list(err.get("loc") or ())
        if loc and loc[0] in prefixes:
            loc = loc[1:]
        # JSON decode errors are located by character offset, not by field
        key = loc[0] if loc and isinstance(loc[0], str) else BASE_KEY
        reason = _reason(err)
        reasons = folded.setdefault(key, [])
        if reason not in reasons:
            reasons.append(reason)
    return folded


def _validation_response(errors: Mapping[str, List[str]]) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"errors": dict(errors)},
    )


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    """
    Return the offending fields with their reasons.

    Response format:
        {"errors": {"name": ["is required"], "due_date": ["must be an integer"]}}
    """
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.errors)
    return _validation_response(exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed JSON bodies and bad query parameters in the same shape."""
    errors = collect_errors(exc.errors(), skip_prefixes=("body", "query"))
    logger.info("%s %s rejected: %s", request.method, request.url.path, errors)
    return _validation_response(errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Framework-raised HTTP errors.

    A 400 only comes from a body that could not be decoded, so it is reported
    as a 422 under BASE_KEY. Anything else (unmatched route, wrong method)
    keeps its status with no body.
    """
    if exc.status_code == status.HTTP_400_BAD_REQUEST:
        logger.info("%s %s rejected: undecodable body", request.method, request.url.path)
        return _validation_response({BASE_KEY: [_REASONS["json_invalid"]]})
    return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def not_found_handler(request: Request, exc: TaskNotFound) -> Response:
    """Not found carries no body."""
    logger.debug("%s %s: %s", request.method, request.url.path, exc)
    return Response(status_code=status.HTTP_404_NOT_FOUND)


async def store_failure_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500; details stay in the server log."""
    logger.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


# PUBLIC_INTERFACE
def install_error_handlers(app: FastAPI) -> None:
    """Register the exception handlers that map domain outcomes to HTTP responses."""
    app.add_exception_handler(ValidationFailure, validation_failure_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(TaskNotFound, not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StoreFailure, store_failure_handler)
    app.add_exception_handler(Exception, store_failure_handler)
