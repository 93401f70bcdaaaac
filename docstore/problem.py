"""
Problem Details (RFC 7807) rendering with Accept-header negotiation.

JSON clients get ``application/problem+json``, ``text/plain`` clients a text
body, browsers a 307 to the login page for authentication failures.
"""
from __future__ import annotations

import logging
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from docstore.errors import AppError, BadRequestError, RedirectError
from docstore.schemas import ProblemDetail

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


class Content(Enum):
    TEXT = "text"
    JSON = "json"
    HTML = "html"


def negotiate_content(accept: str) -> Content:
    """Pick the client's preferred representation; JSON unless told otherwise."""
    best = None
    best_q = -1.0
    for part in (accept or "").split(","):
        media, _, params = part.strip().partition(";")
        media = media.strip().lower()
        if not media:
            continue
        q = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        if q > best_q:
            best, best_q = media, q
    if best is None:
        return Content.JSON
    subtype = best.partition("/")[2]
    if subtype == "html":
        return Content.HTML
    if subtype == "plain":
        return Content.TEXT
    return Content.JSON


def problem_for(err: AppError, request: Request) -> ProblemDetail:
    instance = err.url if isinstance(err, RedirectError) else request.url.path
    return ProblemDetail(
        title=err.title,
        status=err.status,
        detail=err.detail or str(err),
        instance=instance,
    )


def render_error(err: AppError, request: Request) -> Response:
    content = negotiate_content(request.headers.get("accept", ""))
    if isinstance(err, RedirectError) and content is Content.HTML:
        return RedirectResponse(err.url, status_code=307)

    problem = problem_for(err, request)
    if content is Content.JSON:
        return JSONResponse(
            problem.model_dump(), status_code=problem.status, media_type=PROBLEM_MEDIA_TYPE
        )
    return PlainTextResponse(f"{problem.title}: {problem.detail}", status_code=problem.status)


async def handle_app_error(request: Request, exc: AppError) -> Response:
    if exc.status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status, exc)
    return render_error(exc, request)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    logger.warning("could not bind supplied payload: %s", exc.errors())
    return render_error(BadRequestError(f"could not bind supplied data: {exc.errors()}"), request)


async def handle_unexpected_error(request: Request, exc: Exception) -> Response:
    logger.error("unexpected error on %s %s", request.method, request.url.path, exc_info=True)
    return render_error(AppError(str(exc)), request)


def register_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
