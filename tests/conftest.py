"""Shared fixtures for media storage tests.

The boto3 S3 client is replaced by a MagicMock; failures are simulated with
real botocore exceptions so that error translation runs exactly as it does
against a live object store.
"""

from pathlib import Path
from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest

from media_storage.storage.adapter import MediaStorageAdapter
from media_storage.storage.s3_client import ObjectStoreClient
from tests.helpers import PROCESSING_TIME, PUBLIC_DOMAIN, image_bytes


@pytest.fixture
def storage_config() -> Dict[str, str]:
    """Host configuration in camelCase form."""
    return {
        "bucket": "b",
        "endpoint": "https://account.r2.cloudflarestorage.com",
        "accessKeyId": "test-access-key",
        "secretAccessKey": "test-secret-key",
        "publicDomain": PUBLIC_DOMAIN,
    }


@pytest.fixture
def mock_s3() -> MagicMock:
    """Mock boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def uploads(mock_s3: MagicMock) -> Dict[str, Dict[str, Any]]:
    """Capture bodies passed to upload_fileobj, keyed by object key."""
    captured: Dict[str, Dict[str, Any]] = {}

    def fake_upload(fileobj, bucket, key, ExtraArgs=None, Config=None):
        captured[key] = {
            "bucket": bucket,
            "data": fileobj.read(),
            "extra_args": ExtraArgs,
            "config": Config,
        }

    mock_s3.upload_fileobj.side_effect = fake_upload
    return captured


@pytest.fixture
def object_store(mock_s3: MagicMock) -> ObjectStoreClient:
    """ObjectStoreClient wired to the mock boto3 client."""
    return ObjectStoreClient(
        endpoint_url="https://account.r2.cloudflarestorage.com",
        access_key_id="test-access-key",
        secret_access_key="test-secret-key",
        bucket_name="b",
        client=mock_s3,
    )


@pytest.fixture
def adapter(storage_config: Dict[str, str], object_store: ObjectStoreClient) -> MediaStorageAdapter:
    """Adapter with a mocked object store and a fixed clock."""
    return MediaStorageAdapter(
        storage_config,
        client=object_store,
        clock=lambda: PROCESSING_TIME,
    )


@pytest.fixture
def make_image_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing test images into a temporary directory."""

    def _make(
        width: int,
        height: int,
        fmt: str = "PNG",
        mode: str = "RGB",
        name: str = "upload.png",
    ) -> Path:
        path = tmp_path / name
        path.write_bytes(image_bytes(width, height, fmt=fmt, mode=mode))
        return path

    return _make
