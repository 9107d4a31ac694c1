from textwrap import dedent
import logging
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute

from s3_store.adapters.settings_store import BaseSettingsProvider, JsonFileSettingsProvider
from s3_store.config.settings import Settings
from s3_store.errors import (
    ConfigurationError,
    handle_broad_exceptions,
    handle_configuration_errors,
    handle_pydantic_validation_errors,
)
from s3_store.routers.health import router as health_router
from s3_store.routers.settings import router as settings_router

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    settings_provider: Optional[BaseSettingsProvider] = None,
) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    settings_provider = settings_provider or JsonFileSettingsProvider(settings.settings_file)

    app = FastAPI(
        title=settings.app_name,
        summary="Configure where stored files live",
        version="v1",
        description=dedent(
            """\
        Storage settings for files kept in an Amazon S3 bucket.

        | Option | Notes |
        | --- | --- |
        | Expiration (minutes) | `0` uploads public files; anything greater uploads private files served with signed URLs |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.state.settings = settings
    app.state.settings_provider = settings_provider

    app.include_router(settings_router, prefix="/v1", tags=["settings"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=ConfigurationError,
        handler=handle_configuration_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"Created app with settings file {settings.settings_file}")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    logging.basicConfig(level=settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=8000)
