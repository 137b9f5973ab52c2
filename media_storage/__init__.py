"""S3-compatible media storage adapter.

Uploads are transcoded to WebP, stored under date-partitioned keys and
served back through a public domain.
"""

from media_storage.core.errors import (
    ConfigurationError,
    MediaStorageError,
    NotFoundError,
    TranscodeError,
    TransportError,
)
from media_storage.storage.adapter import MediaStorageAdapter

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "MediaStorageAdapter",
    "MediaStorageError",
    "NotFoundError",
    "TranscodeError",
    "TransportError",
    "__version__",
]
