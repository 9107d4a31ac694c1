from fastapi import APIRouter, Request

from s3_store.config.storage import StorageConfiguration
from s3_store.errors import ConfigurationError
from s3_store.factory import StoreFactory

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and bucket readiness.

    Returns the status of the API and of the configured bucket.
    """
    settings = request.app.state.settings
    provider = request.app.state.settings_provider

    health_status = {
        "status": "ok",
        "components": {
            "api": "ready",
            "storage": "initializing",
        },
        "ready": False
    }

    config = StorageConfiguration.from_provider(provider)
    try:
        store = StoreFactory.create_store(config, settings)
    except ConfigurationError as e:
        health_status["components"]["storage"] = f"unconfigured: {str(e)}"
        health_status["status"] = "degraded"
        return health_status

    if store.can_store():
        health_status["components"]["storage"] = "ready"
        health_status["ready"] = True
    else:
        health_status["components"]["storage"] = f"error: bucket '{config.bucket}' is not reachable"
        health_status["status"] = "degraded"

    return health_status
