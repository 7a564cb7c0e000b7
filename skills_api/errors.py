"""Map domain errors onto HTTP responses.

Every handler answers with a {"detail": ...} body, the same shape FastAPI
uses for HTTPException.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from skills_core.errors import (
    DataUnavailable,
    GateNotSatisfied,
    LessonNotFound,
    NotAuthenticated,
    PersistenceFailure,
    QuizNotFound,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotAuthenticated: 401,
    LessonNotFound: 404,
    QuizNotFound: 404,
    GateNotSatisfied: 409,
    PersistenceFailure: 500,
    DataUnavailable: 503,
}


def _handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.warning("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        headers = {"Retry-After": "5"} if isinstance(exc, DataUnavailable) else None
        return JSONResponse(
            status_code=status_code, content={"detail": str(exc)}, headers=headers
        )

    return handle


def register_error_handlers(app: FastAPI) -> None:
    for exc_class, status_code in ERROR_STATUS.items():
        app.add_exception_handler(exc_class, _handler(status_code))
