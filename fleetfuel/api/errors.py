from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fleetfuel.core.settings import Settings
from fleetfuel.domain.errors import (
    BudgetError,
    IdentityNotFound,
    InvalidAmount,
    InvalidLimit,
    InvalidTripCost,
    RoleMismatch,
    StoreUnavailable,
    TripGroupMismatch,
)

STATUS_CODES: dict[type[BudgetError], int] = {
    IdentityNotFound: 404,
    StoreUnavailable: 503,
    InvalidLimit: 422,
    InvalidAmount: 422,
    InvalidTripCost: 422,
    RoleMismatch: 409,
    TripGroupMismatch: 422,
}


def status_code_for(exc: BudgetError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Map domain errors to JSON responses with an inline message and retry hint."""

    @app.exception_handler(BudgetError)
    async def handle_budget_error(request: Request, exc: BudgetError) -> JSONResponse:
        headers = {}
        if exc.retryable:
            headers["Retry-After"] = str(settings.store_retry_after_s)
        return JSONResponse(
            status_code=status_code_for(exc),
            content={
                "error": type(exc).__name__,
                "detail": exc.message,
                "retryable": exc.retryable,
            },
            headers=headers,
        )
