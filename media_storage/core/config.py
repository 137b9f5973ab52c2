"""Configuration management for the media storage adapter.

Two layers of configuration live here:

- StorageConfig: the immutable boundary contract handed to
  MediaStorageAdapter by its host (bucket, endpoint, credentials, public
  domain and transcoding options). It accepts the host's camelCase keys as
  well as snake_case names.
- Settings: process-level settings for the CLI and HTTP app, loaded from
  environment variables or a .env file with pydantic-settings.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, Union

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from media_storage.core.errors import ConfigurationError

DEFAULT_MAX_WIDTH = 1280
DEFAULT_QUALITY = 80
# Keys are never reused, so objects can be cached for a year
DEFAULT_CACHE_CONTROL = "max-age=31536000"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class ImageFormat(str, Enum):
    """Output encodings supported by the transcoder."""

    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"

    @property
    def pillow_format(self) -> str:
        """Format name understood by Pillow's Image.save."""
        return self.value.upper()

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value


class StorageConfig(BaseModel):
    """Adapter configuration supplied once by the host.

    Attributes:
        bucket: Name of the object store bucket
        endpoint: S3-compatible API endpoint URL
        access_key_id: Access key ID for request signing
        secret_access_key: Secret access key for request signing
        public_domain: Base URL under which stored objects are reachable
        max_width: Maximum width of transcoded images in pixels
        image_format: Output encoding of transcoded images
        quality: Encoder quality (1-100)
        cache_control: Cache-Control header stored with every upload
        region: Signing region; custom endpoints use the "auto" wildcard
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    bucket: str = Field(..., min_length=1, description="Bucket name")
    endpoint: str = Field(..., min_length=1, description="S3 API endpoint URL")
    access_key_id: str = Field(
        ...,
        alias="accessKeyId",
        min_length=1,
        description="Access key ID",
    )
    secret_access_key: str = Field(
        ...,
        alias="secretAccessKey",
        min_length=1,
        description="Secret access key",
    )
    public_domain: str = Field(
        ...,
        alias="publicDomain",
        min_length=1,
        description="Public base URL for stored objects",
    )
    max_width: int = Field(
        default=DEFAULT_MAX_WIDTH,
        alias="maxWidth",
        gt=0,
        description="Maximum output width in pixels",
    )
    image_format: ImageFormat = Field(
        default=ImageFormat.WEBP,
        alias="format",
        description="Output image format",
    )
    quality: int = Field(
        default=DEFAULT_QUALITY,
        ge=1,
        le=100,
        description="Encoder quality (1-100)",
    )
    cache_control: str = Field(
        default=DEFAULT_CACHE_CONTROL,
        alias="cacheControl",
        description="Cache-Control header for uploaded objects",
    )
    region: str = Field(default="auto", description="Signing region")

    @field_validator("endpoint", "public_domain")
    @classmethod
    def require_http_url(cls, v: str) -> str:
        """Reject values that are not absolute http(s) URLs with a host."""
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError:
            raise ValueError(f"{v!r} is not an http(s) URL") from None
        return v

    @field_validator("public_domain")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so URLs join with exactly one separator.

        Args:
            v: The configured public domain

        Returns:
            The domain without trailing slashes

        Raises:
            ValueError: If nothing but slashes was configured
        """
        v = v.rstrip("/")
        if not v:
            raise ValueError("publicDomain must not be empty")
        return v


def load_storage_config(
    config: Union[StorageConfig, Mapping[str, Any]],
) -> StorageConfig:
    """Validate host configuration into a StorageConfig.

    Args:
        config: A StorageConfig or a mapping in the host's config shape

    Returns:
        Validated, immutable StorageConfig

    Raises:
        ConfigurationError: If any required field is missing or invalid
    """
    if isinstance(config, StorageConfig):
        return config
    if config is None:
        config = {}

    try:
        return StorageConfig.model_validate(dict(config))
    except ValidationError as e:
        fields = [str(err["loc"][0]) for err in e.errors() if err.get("loc")]
        raise ConfigurationError(
            f"Invalid storage configuration: {', '.join(fields) or 'unknown field'}",
            fields=fields,
        ) from e


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Storage fields default to empty strings so that settings always load;
    they are validated when an adapter is built from them.

    Attributes:
        storage_bucket: Bucket name
        storage_endpoint: S3-compatible endpoint URL
        storage_access_key_id: Access key ID
        storage_secret_access_key: Secret access key
        storage_public_domain: Public base URL for stored objects
        image_max_width: Maximum output width in pixels
        image_format: Output image format
        image_quality: Encoder quality (1-100)
        cache_control: Cache-Control header for uploads
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        api_host: Host to bind the HTTP server
        api_port: Port for the HTTP server
        api_reload: Enable auto-reload for development
        serve_prefix: URL prefix under which stored objects are served
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Object store
    storage_bucket: str = Field(default="", description="Bucket name")
    storage_endpoint: str = Field(default="", description="S3 API endpoint URL")
    storage_access_key_id: str = Field(default="", description="Access key ID")
    storage_secret_access_key: str = Field(default="", description="Secret access key")
    storage_public_domain: str = Field(
        default="",
        description="Public base URL for stored objects",
    )

    # Transcoding
    image_max_width: int = Field(
        default=DEFAULT_MAX_WIDTH,
        description="Maximum output width in pixels",
        gt=0,
    )
    image_format: ImageFormat = Field(
        default=ImageFormat.WEBP,
        description="Output image format",
    )
    image_quality: int = Field(
        default=DEFAULT_QUALITY,
        description="Encoder quality (1-100)",
        ge=1,
        le=100,
    )
    cache_control: str = Field(
        default=DEFAULT_CACHE_CONTROL,
        description="Cache-Control header for uploaded objects",
    )

    # Application
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="Host to bind HTTP server")
    api_port: int = Field(default=8000, description="Port for HTTP server")
    api_reload: bool = Field(default=False, description="Enable auto-reload")
    serve_prefix: str = Field(
        default="/content/uploads",
        description="URL prefix under which stored objects are served",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level.

        Args:
            v: The log_level value

        Returns:
            The upper-cased log level

        Raises:
            ValueError: If the level is not a known logging level
        """
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("serve_prefix")
    @classmethod
    def validate_serve_prefix(cls, v: str) -> str:
        return "/" + v.strip("/")

    def storage_config(self) -> StorageConfig:
        """Build the adapter configuration from these settings.

        Returns:
            Validated StorageConfig

        Raises:
            ConfigurationError: If any storage setting is missing
        """
        return load_storage_config(
            {
                "bucket": self.storage_bucket,
                "endpoint": self.storage_endpoint,
                "accessKeyId": self.storage_access_key_id,
                "secretAccessKey": self.storage_secret_access_key,
                "publicDomain": self.storage_public_domain,
                "maxWidth": self.image_max_width,
                "format": self.image_format,
                "quality": self.image_quality,
                "cacheControl": self.cache_control,
            }
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
