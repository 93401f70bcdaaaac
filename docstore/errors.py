"""
Error taxonomy. Every error the API surfaces carries the HTTP status it maps to.
"""
from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base class for errors rendered as Problem Details."""

    status: int = 500
    title: str = "Internal Server Error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class BadRequestError(AppError):
    status = 400
    title = "Bad Request"


class NotFoundError(AppError):
    status = 404
    title = "Not Found"


class UnauthorizedError(AppError):
    status = 401
    title = "Unauthorized"


class ForbiddenError(AppError):
    status = 403
    title = "Forbidden"


class RedirectError(AppError):
    """Authentication failure: browsers are sent to ``url``, API clients get ``status``."""

    title = "Redirect"

    def __init__(self, detail: str, url: str, status: int = 401):
        super().__init__(detail)
        self.url = url
        self.status = status


class ServerError(AppError):
    status = 500
    title = "Internal Server Error"


class InfraError(ServerError):
    """A database, object-store or disk operation failed."""


class DeadlineExceeded(ServerError):
    """The request-scoped deadline fired before the operation finished."""

    title = "Deadline Exceeded"

    def __init__(self, step: str, detail: Optional[str] = None):
        super().__init__(detail or f"request deadline exceeded before '{step}'")
        self.step = step


class ConfigError(Exception):
    """Raised at startup when the configuration cannot be used."""
