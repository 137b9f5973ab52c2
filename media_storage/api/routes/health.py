"""Health check endpoint for monitoring API status.

This module provides a simple health check endpoint that verifies:
- API is running
- Storage settings are complete enough to build the adapter
"""

from fastapi import APIRouter

from media_storage.api import dependencies
from media_storage.api.models import HealthResponse
from media_storage.core.errors import ConfigurationError

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check() -> HealthResponse:
    """Check API and storage configuration health.

    No request is sent to the object store; this only reports whether an
    adapter can be built from the current settings.

    Returns:
        HealthResponse: Health status information

    Example:
        GET /health
        Response:
        {
            "status": "healthy",
            "storage": "configured",
            "bucket": "media"
        }
    """
    try:
        adapter = dependencies.get_adapter()
    except ConfigurationError:
        return HealthResponse(status="unconfigured", storage="unconfigured")

    return HealthResponse(status="healthy", storage="configured", bucket=adapter.bucket)
