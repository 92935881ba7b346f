"""Map domain exceptions to JSON error responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from homeloan_gateway.domain.exceptions import (
    DuplicateRegistrationError,
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)

logger = logging.getLogger("homeloan_gateway.api")


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _respond(request: Request, status_code: int, payload: dict) -> JSONResponse:
    request_id = _get_request_id(request)
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FieldValidationError)
    async def field_validation_handler(request: Request, exc: FieldValidationError):
        return _respond(request, 422, {"detail": "Validation failed", "errors": exc.errors})

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
        return _respond(
            request,
            409,
            {
                "detail": str(exc),
                "current_status": exc.current,
                "requested_status": exc.requested,
            },
        )

    @app.exception_handler(StaleStateError)
    async def stale_state_handler(request: Request, exc: StaleStateError):
        return _respond(
            request,
            409,
            {
                "detail": f"{exc.entity} was changed by another request; reload and retry",
                "expected_status": exc.expected,
                "retryable": True,
            },
        )

    @app.exception_handler(DuplicateRegistrationError)
    async def duplicate_registration_handler(request: Request, exc: DuplicateRegistrationError):
        return _respond(request, 409, {"detail": str(exc)})

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return _respond(request, 404, {"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def persistence_handler(request: Request, exc: SQLAlchemyError):
        logger.error("persistence_failure request_id=%s error=%s", _get_request_id(request), exc)
        return _respond(request, 503, {"detail": "Persistence layer unavailable"})
