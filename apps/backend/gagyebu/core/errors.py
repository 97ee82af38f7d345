"""Error taxonomy shared by services and route handlers.

Services raise :class:`AppError` subclasses; handlers wrap service calls in
:func:`guard` so that anything else (store failures, bugs) is logged with
context and surfaced as a generic 500 without leaking internals.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from .logging import format_context

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500


@contextmanager
def guard(message: str, **context: object) -> Iterator[None]:
    """Convert unexpected failures inside the block into :class:`InternalError`.

    ``message`` is what the caller sees; the original exception is only logged.
    """
    try:
        yield
    except (AppError, HTTPException):
        raise
    except Exception as exc:
        logger.exception("%s %s", message, format_context(**context))
        raise InternalError(message) from exc
