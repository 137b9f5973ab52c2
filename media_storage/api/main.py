"""FastAPI application hosting the media storage adapter.

This is the HTTP entry point. It provides:
- Image upload (transcoded and stored in the object store)
- Streaming of stored objects under the serve prefix
- Existence checks and deletes
- Health check endpoint
- API documentation (automatic via FastAPI)

Errors raised by the adapter reach the exception handlers registered here;
this is where failures forwarded by the serve handler are turned into
responses.
"""

from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from loguru import logger

from media_storage import __version__
from media_storage.api.dependencies import get_adapter
from media_storage.api.models import APIInfoResponse, ErrorResponse
from media_storage.api.routes import files, health
from media_storage.core.config import Settings, get_settings
from media_storage.core.errors import ConfigurationError, TranscodeError, TransportError
from media_storage.storage.adapter import MediaStorageAdapter

API_NAME = "Media Storage API"
API_DESCRIPTION = "Stores uploaded images in an S3-compatible bucket and serves them back"


def serve_object(
    request: Request,
    adapter: MediaStorageAdapter = Depends(get_adapter),
) -> Response:
    """Stream a stored object; the key is the request path."""
    return adapter.serve()(request)


async def transcode_error_handler(request: Request, exc: TranscodeError) -> JSONResponse:
    logger.warning(f"Rejected upload on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(detail=str(exc)).model_dump(),
    )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.error(f"Object store failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=ErrorResponse(detail="Object store request failed").model_dump(),
    )


async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.error(f"Storage is not configured: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(detail="Storage is not configured").model_dump(),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment if omitted

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=API_NAME,
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(TranscodeError, transcode_error_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(files.router)

    @app.get("/", response_model=APIInfoResponse, tags=["Root"])
    def root() -> APIInfoResponse:
        """API root endpoint.

        Returns:
            APIInfoResponse: API name, version, and description
        """
        return APIInfoResponse(
            name=API_NAME,
            version=__version__,
            description=API_DESCRIPTION,
        )

    app.add_api_route(
        f"{settings.serve_prefix.rstrip('/')}/{{path:path}}",
        serve_object,
        methods=["GET"],
        tags=["Serve"],
        include_in_schema=False,
    )

    return app


app = create_app()


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "media_storage.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
