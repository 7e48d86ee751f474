"""Map service exceptions to HTTP responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from survey_fleet.errors import NotFoundError, PersistenceError, PreconditionError, ValidationError

logger = logging.getLogger(__name__)

STATUS_CODES = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (PreconditionError, 409),
    (PersistenceError, 500),
)


def register_exception_handlers(app: FastAPI):
    for exc_type, status_code in STATUS_CODES:
        app.add_exception_handler(exc_type, _handler(status_code))


def _handler(status_code: int):
    async def handle(request: Request, exc: Exception):
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})
    return handle
