"""Configuration, errors and value objects shared across the package."""

from media_storage.core.config import ImageFormat, Settings, StorageConfig, load_storage_config
from media_storage.core.errors import (
    ConfigurationError,
    MediaStorageError,
    NotFoundError,
    TranscodeError,
    TransportError,
)
from media_storage.core.models import StoredObject, TranscodedImage, UploadedImage

__all__ = [
    "ConfigurationError",
    "ImageFormat",
    "MediaStorageError",
    "NotFoundError",
    "Settings",
    "StorageConfig",
    "StoredObject",
    "TranscodeError",
    "TranscodedImage",
    "TransportError",
    "UploadedImage",
    "load_storage_config",
]
