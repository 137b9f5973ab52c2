"""Storage package for S3-compatible object storage.

This package provides the object store client and the media storage
adapter that hosts call to save, serve, read and delete uploads.
"""

from media_storage.storage.adapter import MediaStorageAdapter
from media_storage.storage.s3_client import ObjectStoreClient

__all__ = ["MediaStorageAdapter", "ObjectStoreClient"]
