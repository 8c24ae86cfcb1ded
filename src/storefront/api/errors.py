"""HTTP mapping of storefront errors.

Conflicts with current state (stock, transitions, id allocation) are 409,
missing records 404, other domain validation failures 400. Anything else
protean raises falls through to its own FastAPI handlers.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    DuplicateId,
    EmptyCart,
    InsufficientStock,
    InvalidCoupon,
    InvalidInput,
    InvalidTransition,
    NotFound,
)

ERROR_STATUS_CODES = {
    NotFound: 404,
    InsufficientStock: 409,
    DuplicateId: 409,
    InvalidTransition: 409,
    InvalidInput: 400,
    InvalidCoupon: 400,
    EmptyCart: 400,
}


async def storefront_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (code for error_class, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_class)),
        400,
    )
    return JSONResponse(status_code=status_code, content={"error": exc.messages})


def register_storefront_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for error_class in ERROR_STATUS_CODES:
        app.add_exception_handler(error_class, storefront_error_handler)
