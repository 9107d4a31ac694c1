import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from s3_store.config.settings import Settings
from s3_store.config.storage import StorageConfiguration
from s3_store.factory import StoreFactory
from s3_store.schemas import (
    SettingsForm,
    SettingsResponse,
    SettingsValidationErrorResponse,
)
from s3_store.validation import validate_configuration

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings", response_model=SettingsResponse)
async def get_storage_settings(request: Request) -> SettingsResponse:
    """Return the persisted storage options with the secret key masked."""
    provider = request.app.state.settings_provider
    return SettingsResponse.from_configuration(StorageConfiguration.from_provider(provider))


@router.put(
    "/settings",
    response_model=SettingsResponse,
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": SettingsValidationErrorResponse},
    },
)
async def update_storage_settings(request: Request, form: SettingsForm):
    """
    Check new storage options with the service and persist them.

    Credentials are checked by listing buckets, then the bucket must be one of
    them and its region must match. Nothing is saved unless every check passes.
    """
    settings: Settings = request.app.state.settings
    provider = request.app.state.settings_provider

    config = form.to_configuration()
    store = StoreFactory.create_store(config, settings)
    report = validate_configuration(store, config)

    if not report.valid:
        logger.warning(f"Rejected storage settings for bucket '{config.bucket}': {report.errors}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=SettingsValidationErrorResponse(
                detail=report.errors,
                bucket_region=report.bucket_region,
            ).model_dump(),
        )

    config.save_to(provider)
    logger.info(f"Saved storage settings for bucket '{config.bucket}' ({config.region})")
    return SettingsResponse.from_configuration(config)
