"""
Global exception handlers for the logos app.

- LogoError: its own status and message, logged at WARNING below 500
- AuthRequired: 302 to the login route, remembering where to come back
- Exception (catch-all): 500 with a generic message, never internal details

HTML pages get ``error.html``; paths under the JSON API prefix get a
``{"error": {...}}`` body.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from logos.errors import AuthRequired, LogoError
from logos.templating import render

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something broke!"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(LogoError)
    async def logo_error_handler(request: Request, exc: LogoError):
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            "%s error on %s %s: %s",
            exc.kind.value,
            request.method,
            request.url.path,
            exc.message,
        )
        return error_response(request, exc.http_status, exc.to_response())

    @app.exception_handler(AuthRequired)
    async def auth_required_handler(request: Request, exc: AuthRequired):
        login_url = "/auth/login?" + urlencode({"return": exc.return_to})
        return RedirectResponse(login_url, status_code=status.HTTP_302_FOUND)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        payload = {"error": {"kind": "internal", "message": GENERIC_MESSAGE}}
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, payload
        )


def error_response(request: Request, status_code: int, payload: dict):
    api_prefix = request.app.state.settings.api_prefix
    if request.url.path.startswith(api_prefix + "/"):
        return JSONResponse(status_code=status_code, content=payload)
    return render(
        request,
        "error.html",
        {"message": payload["error"]["message"]},
        status_code=status_code,
    )
