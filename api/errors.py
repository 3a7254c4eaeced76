"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from api.middleware import request_id_of
from core.exceptions import NotFound, StoreError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                str(exc),
                fields=exc.fields,
                request_id=request_id_of(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(
            status_code=404,
            content=error_response(
                ErrorCodes.NOT_FOUND, str(exc), request_id=request_id_of(request)
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Store failure during {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content=error_response(
                ErrorCodes.STORE_UNAVAILABLE,
                "Order storage failed; re-fetch the order to check its current state",
                request_id=request_id_of(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.INVALID_REQUEST,
                str(exc.errors()),
                request_id=request_id_of(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(
                ErrorCodes.INTERNAL_ERROR,
                "An internal error occurred",
                request_id=request_id_of(request),
            ).model_dump(mode="json"),
        )
