"""Translate marketplace exceptions into HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import AccessDenied, CheckoutRejected, StockContention

logger = structlog.get_logger(__name__)


async def checkout_rejected(request: Request, exc: CheckoutRejected):
    return JSONResponse(
        status_code=400,
        content={"error": exc.message, "code": exc.code, "product_id": exc.product_id},
    )


async def access_denied(request: Request, exc: AccessDenied):
    return JSONResponse(status_code=403, content={"error": exc.message})


async def stock_contention(request: Request, exc: StockContention):
    logger.warning("Stock contention", product_id=exc.product_id, path=request.url.path)
    return JSONResponse(status_code=409, content={"error": str(exc), "product_id": exc.product_id})


async def invalid_request(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    # Protean's own mapping covers ValidationError (400) and ObjectNotFoundError (404)
    register_exception_handlers(app)

    app.add_exception_handler(CheckoutRejected, checkout_rejected)
    app.add_exception_handler(AccessDenied, access_denied)
    app.add_exception_handler(StockContention, stock_contention)
    app.add_exception_handler(RequestValidationError, invalid_request)
    app.add_exception_handler(Exception, unexpected_error)
