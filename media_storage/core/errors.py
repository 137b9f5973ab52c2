"""Error taxonomy for the media storage adapter.

Every failure the adapter can observe is expressed as a subclass of
MediaStorageError so callers can decide how to degrade:

- ConfigurationError: required configuration is missing or invalid
- NotFoundError: the object store reports the key as absent
- TranscodeError: the uploaded image could not be decoded or re-encoded
- TransportError: any other object store failure (network, auth, 5xx)
"""

from typing import Iterable, Optional


class MediaStorageError(Exception):
    """Base class for all media storage errors."""


class ConfigurationError(MediaStorageError):
    """Raised when the adapter configuration is incomplete or invalid.

    Attributes:
        fields: Names of the offending configuration fields
    """

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


class NotFoundError(MediaStorageError):
    """Raised when the object store reports that a key does not exist.

    Attributes:
        key: Object key that was looked up
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}")
        self.key = key


class TranscodeError(MediaStorageError):
    """Raised when an image cannot be decoded or re-encoded."""


class TransportError(MediaStorageError):
    """Raised for object store failures other than a missing key.

    Attributes:
        key: Object key involved in the failed call
        operation: Object store operation name (e.g. "GetObject")
        cause: Underlying boto3/botocore exception
    """

    def __init__(
        self,
        key: str,
        operation: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed for {key}{detail}")
        self.key = key
        self.operation = operation
        self.cause = cause
