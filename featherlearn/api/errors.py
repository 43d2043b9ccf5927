"""
Exception handlers.

Every error body is ``{"detail", "code"}``. Error responses carry the CORS and
X-Request-ID headers themselves because responses built in exception handlers
can skip the middleware that would normally add them.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from featherlearn.config import get_settings
from featherlearn.kernel.errors import DomainError
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)

_HTTP_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _error_response(
    request: Request,
    status_code: int,
    detail: Any,
    code: str,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    origins: List[str] = get_settings().cors_origins
    origin = request.headers.get("origin") or ""
    allow_origin = origin if origin in origins else (origins[0] if origins else None)
    response_headers: Dict[str, str] = {}
    if allow_origin:
        response_headers.update({
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": "*",
            "Access-Control-Allow-Headers": "*",
        })
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response_headers["X-Request-ID"] = request_id
    if status_code == status.HTTP_401_UNAUTHORIZED:
        response_headers["WWW-Authenticate"] = "Bearer"
    response_headers.update(headers or {})

    content: Dict[str, Any] = {"detail": detail, "code": code}
    content.update(extra or {})
    if request_id and status_code >= 500:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=response_headers)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Domain error: %s", exc.message, extra={"code": exc.code})
    else:
        logger.info("Request rejected: %s", exc.message, extra={"code": exc.code})
    return _error_response(request, exc.status_code, exc.message, exc.code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    return _error_response(request, exc.status_code, exc.detail, code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with one entry per failing field."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "request_invalid",
        extra={"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    if get_settings().debug:
        return _error_response(
            request, 500, str(exc), "internal_error", extra={"type": type(exc).__name__}
        )
    return _error_response(request, 500, "Internal server error", "internal_error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
