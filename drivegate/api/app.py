import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from drivegate import __version__
from drivegate.api.errors import (
    handle_broad_exceptions,
    handle_drivegate_error,
    handle_http_exception,
    handle_local_not_found,
    handle_request_validation_error,
    handle_validation_error,
)
from drivegate.api.routers.drive import router as drive_router
from drivegate.api.routers.health import router as health_router
from drivegate.api.routers.local import router as local_router
from drivegate.sdk.auth import CredentialProvider
from drivegate.sdk.config import load_config
from drivegate.sdk.drive import DriveClient, FileOperations, FolderOperations
from drivegate.sdk.exceptions import DriveGateError, LocalFileNotFoundError, ValidationError
from drivegate.sdk.local import LocalStore
from drivegate.sdk.retry import RetryPolicy
from drivegate.sdk.stage import TemporaryStage

logger = logging.getLogger(__name__)


def create_app(config: Optional[dict] = None, drive_client: Optional[DriveClient] = None) -> FastAPI:
    """Create the gateway application.

    Args:
        config: Loaded configuration; read from disk and environment when omitted
        drive_client: Drive adapter to use; built from the configured credentials when omitted

    Raises:
        ConfigurationError: If no adapter is given and no credentials are configured
    """
    config = config or load_config()

    if drive_client is None:
        provider = CredentialProvider.from_config(config)
        logger.info(f"Using Drive credentials from {provider.source}")
        drive_client = DriveClient(provider, retry_policy=RetryPolicy.from_config(config))

    app = FastAPI(
        title="drivegate",
        summary="Upload, download, update, delete and search files in Google Drive",
        version=__version__,
        generate_unique_id_function=custom_generate_unique_id,
    )

    stage = TemporaryStage.from_config(config)
    app.state.config = config
    app.state.stage = stage
    app.state.local_store = LocalStore(stage)
    app.state.files = FileOperations(drive_client)
    app.state.folders = FolderOperations(drive_client)

    app.include_router(drive_router, tags=["drive"])
    app.include_router(local_router, tags=["local"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(LocalFileNotFoundError, handle_local_not_found)
    app.add_exception_handler(DriveGateError, handle_drivegate_error)
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"Staging images in {stage.image_dir}, files in {stage.upload_dir}")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"
