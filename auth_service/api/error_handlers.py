"""
Exception Handlers
------------------
Maps the service error taxonomy and authorization denials to JSON responses of
the form ``{"detail": ..., "error_type": ...}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from auth_service.auth.dependencies import AuthorizationDeniedError
from auth_service.core.exceptions import AuthServiceError


async def auth_service_exception_handler(
    request: Request, exc: AuthServiceError
) -> JSONResponse:
    """Translate an AuthServiceError into its HTTP status and error type."""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.error_type} on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
    else:
        logger.info(
            f"{exc.error_type} on {request.method} {request.url.path}: {exc.message}"
        )

    headers = None
    if exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}

    # Server-side details stay in the logs
    detail = exc.message if exc.status_code < 500 else "internal server error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "error_type": exc.error_type},
        headers=headers,
    )


async def authorization_denied_handler(
    request: Request, exc: AuthorizationDeniedError
) -> JSONResponse:
    """Bearer-token and route-gate denials, keyed by the denial reason."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_type": exc.error_type},
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, auth_service_exception_handler)
    app.add_exception_handler(AuthorizationDeniedError, authorization_denied_handler)
