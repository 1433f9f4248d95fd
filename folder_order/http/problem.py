"""Problem+JSON utilities and global exception handlers.

Defines RFC7807 media type and handler callables that produce
application/problem+json responses for HTTP, validation, domain and
unexpected errors.
"""

from __future__ import annotations

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse

from folder_order.http.error_mapping import lookup
from folder_order.logic.errors import NotFound, OrderingError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = exc.detail
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(detail, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
            for err in exc.errors()
        ],
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_ordering_error(request: Request, exc: OrderingError) -> JSONResponse:  # noqa: D401
    mapped = lookup(exc)
    problem = {**mapped, "detail": str(exc)}
    if isinstance(exc, NotFound):
        problem["kind"] = exc.kind
        problem["id"] = exc.ident
    if mapped["status"] >= 500:
        logger.error(
            "ordering_error code=%s path=%s detail=%s", exc.code, request.url.path, exc
        )
    else:
        logger.info("ordering_error code=%s path=%s detail=%s", exc.code, request.url.path, exc)
    return JSONResponse(problem, status_code=mapped["status"], media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_ordering_error",
    "handle_unexpected_error",
]
