"""
Error hierarchy for the logos service.

Every failure the routers care about is a ``LogoError`` carrying a kind,
a user-facing message and the HTTP status to answer with. Routers never
recover locally; errors propagate to the handlers in
``logos.error_handlers``.
"""

from __future__ import annotations

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    BACKEND = "backend"
    INVALID_PAGE_TOKEN = "invalid_page_token"
    NOT_FOUND = "not_found"
    UPLOAD = "upload"
    AUTH = "auth"
    CONFIG = "config"


class LogoError(Exception):
    """Base exception for all logos errors."""

    kind: ErrorKind = ErrorKind.BACKEND
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        return {
            "error": {
                "kind": self.kind.value,
                "message": self.message,
            }
        }


class LogoStoreError(LogoError):
    """The storage backend failed to carry out an operation."""


class InvalidPageToken(LogoStoreError):
    # Cursors are opaque to the routers, so a bad one is a backend failure.
    kind = ErrorKind.INVALID_PAGE_TOKEN

    def __init__(self, token: str):
        super().__init__(f"Invalid page token: {token!r}")
        self.token = token


class LogoNotFound(LogoError):
    kind = ErrorKind.NOT_FOUND
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, logo_id: str):
        super().__init__("Not found")
        self.logo_id = logo_id


class UploadError(LogoError):
    kind = ErrorKind.UPLOAD


class AuthError(LogoError):
    kind = ErrorKind.AUTH
    http_status = status.HTTP_400_BAD_REQUEST


class ConfigError(LogoError):
    kind = ErrorKind.CONFIG


class AuthRequired(Exception):
    """Raised by the required-user dependency when nobody is signed in."""

    def __init__(self, return_to: str):
        super().__init__(return_to)
        self.return_to = return_to
