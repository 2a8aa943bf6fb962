"""
Error taxonomy and the JSON error body.

Every error leaves the API as ``{"message": str}`` with the matching status.
Gates and routes raise the ``AcademiaError`` subclasses below; the store raises
``DuplicateError`` when a unique constraint rejects a write. Anything else is
logged and reported as a 500.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AcademiaError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
    headers = None

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AcademiaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AcademiaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFound(AcademiaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidInput(AcademiaError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class Conflict(AcademiaError):
    # the API reports conflicts as 400, not 409
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class DuplicateError(Conflict):
    """A unique constraint rejected a write."""


def _message(message: str, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _message(str(exc.detail), exc.status_code, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    return _message(InvalidInput.default_message, status.HTTP_400_BAD_REQUEST)


async def academia_error_handler(request: Request, exc: AcademiaError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return _message(exc.message, exc.status_code, exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _message(AcademiaError.default_message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AcademiaError, academia_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
