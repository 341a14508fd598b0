"""Exception handlers mapping domain errors to HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from comissio_ledger.api.v1.schemas import ErrorResponse
from comissio_ledger.domain.exceptions import (
    AuthenticationError,
    ConstraintViolationError,
    DomainException,
    IdentityUnavailableError,
    InvalidScheduleError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    VersionConflictError,
)
from comissio_ledger.infrastructure.observability.metrics import store_failure_counter

# (status code, category, retryable); first match wins, so subclasses come first
ERROR_MAP = [
    (StoreUnavailableError, 503, "network", True),
    (ConstraintViolationError, 409, "constraint", False),
    (VersionConflictError, 409, "conflict", False),
    (NotFoundError, 404, "not_found", False),
    (InvalidScheduleError, 422, "validation", False),
    (AuthenticationError, 401, "auth", False),
    (IdentityUnavailableError, 503, "network", True),
    (StoreError, 500, "store", False),
]

STORE_CATEGORIES = {"network", "constraint", "conflict", "store"}

# Documented error bodies for every /v1 route; 422 keeps the request validation schema
ERROR_RESPONSES = {status_code: {"model": ErrorResponse} for status_code in (401, 404, 409, 500, 503)}


def classify(exc: DomainException) -> tuple[int, str, bool]:
    for exc_type, status_code, category, retryable in ERROR_MAP:
        if isinstance(exc, exc_type):
            return status_code, category, retryable
    return 500, "internal", False


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Operator-facing error body: {detail, category, retryable}"""
    status_code, category, retryable = classify(exc)
    request_id = getattr(request.state, "request_id", "unknown")

    if category in STORE_CATEGORIES and not isinstance(exc, IdentityUnavailableError):
        store_failure_counter.labels(category=category).inc()

    if status_code >= 500:
        logging.error(f"{category} error: {exc}", extra={"request_id": request_id})
    else:
        logging.warning(f"{category} error: {exc}", extra={"request_id": request_id})

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), category=category, retryable=retryable).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
