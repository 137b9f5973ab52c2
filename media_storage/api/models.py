"""Pydantic models for API request/response validation."""

from pydantic import BaseModel, Field


class APIInfoResponse(BaseModel):
    """Response model for API root endpoint."""

    name: str = Field(..., description="API name")
    version: str = Field(..., description="API version")
    description: str = Field(..., description="API description")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Health status (healthy/unconfigured)")
    storage: str = Field(..., description="Storage status (configured/unconfigured)")
    bucket: str | None = Field(None, description="Configured bucket name")


class UploadResponse(BaseModel):
    """Response model for a stored upload."""

    url: str = Field(..., description="Public URL of the stored image")


class ExistsResponse(BaseModel):
    """Response model for an existence check."""

    key: str = Field(..., description="Object key")
    exists: bool = Field(..., description="Whether the object exists")


class DeleteResponse(BaseModel):
    """Response model for a delete request."""

    key: str = Field(..., description="Object key")
    deleted: bool = Field(..., description="Whether the delete call succeeded")


class ErrorResponse(BaseModel):
    """Response model for handled errors."""

    detail: str = Field(..., description="Error description")
