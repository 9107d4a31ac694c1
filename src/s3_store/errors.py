"""Error types for the S3 file store and the FastAPI handlers that render them."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for every error raised by the store layer."""


class ConfigurationError(StoreError):
    """Missing credentials or bucket; the store cannot be used at all."""


class StorageWriteError(StoreError):
    """A put, move or delete against the bucket failed."""

    def __init__(self, message: str, source: str = None, destination: str = None, bucket: str = None):
        super().__init__(message)
        self.source = source
        self.destination = destination
        self.bucket = bucket


class StorageReadError(StoreError):
    """A listing, region or existence check against the bucket failed."""


async def handle_configuration_errors(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Render incomplete storage settings as a client error."""
    logger.warning(f"Rejected request with incomplete storage settings: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "input": error["input"],
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates during the request."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
