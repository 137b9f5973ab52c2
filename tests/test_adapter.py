"""Tests for MediaStorageAdapter host operations.

These cover the upload pipeline (key generation, transcoding, upload, URL)
and the error-collapsing behaviour of exists, delete and read.
"""

import re
from datetime import datetime
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ConnectTimeoutError, EndpointConnectionError
from PIL import Image

from media_storage.core.errors import (
    ConfigurationError,
    NotFoundError,
    TranscodeError,
    TransportError,
)
from media_storage.core.models import StoredObject, UploadedImage
from media_storage.storage.adapter import MediaStorageAdapter
from tests.helpers import KEY_PATTERN, PUBLIC_DOMAIN, client_error, streaming_body


class TestAdapterConstruction:
    """Test configuration handling at construction."""

    def test_missing_configuration_raises(self, object_store):
        with pytest.raises(ConfigurationError) as exc_info:
            MediaStorageAdapter({"bucket": "b"}, client=object_store)

        assert "publicDomain" in exc_info.value.fields

    def test_builds_object_store_client_from_config(self, storage_config):
        adapter = MediaStorageAdapter(storage_config)

        assert adapter.client.bucket_name == "b"
        assert adapter.bucket == "b"
        assert adapter.domain == PUBLIC_DOMAIN

    def test_transcoder_follows_config(self, storage_config, object_store):
        storage_config.update({"maxWidth": 640, "quality": 50})

        adapter = MediaStorageAdapter(storage_config, client=object_store)

        assert adapter.transcoder.max_width == 640
        assert adapter.transcoder.quality == 50


class TestKeyGeneration:
    """Test the object key policy."""

    def test_key_format(self, adapter):
        assert re.fullmatch(KEY_PATTERN, adapter.generate_key())

    def test_key_uses_given_date(self, adapter):
        key = adapter.generate_key(datetime(2023, 1, 9, 23, 59))

        assert key.startswith("content/uploads/2023/01/09/")

    def test_keys_are_unique(self, adapter):
        keys = {adapter.generate_key() for _ in range(100)}

        assert len(keys) == 100

    def test_public_url(self, adapter):
        assert adapter.public_url("content/uploads/x.webp") == f"{PUBLIC_DOMAIN}/content/uploads/x.webp"


class TestExists:
    """Test the conservative existence check."""

    def test_existing_object(self, adapter, mock_s3):
        mock_s3.head_object.return_value = {"ContentLength": 10}

        assert adapter.exists("content/uploads/a.webp") is True
        mock_s3.head_object.assert_called_once_with(Bucket="b", Key="content/uploads/a.webp")

    def test_missing_object(self, adapter, mock_s3):
        mock_s3.head_object.side_effect = client_error("NotFound", "HeadObject", status=404)

        assert adapter.exists("content/uploads/a.webp") is False

    @pytest.mark.parametrize(
        "error",
        [
            client_error("AccessDenied", "HeadObject", status=403),
            client_error("InternalError", "HeadObject", status=500),
            EndpointConnectionError(endpoint_url="https://example.com"),
            ConnectTimeoutError(endpoint_url="https://example.com"),
        ],
    )
    def test_other_failures_report_existing(self, adapter, mock_s3, error):
        """Test that an unknown state is reported as 'exists'."""
        mock_s3.head_object.side_effect = error

        assert adapter.exists("content/uploads/a.webp") is True


class TestStat:
    """Test the uncollapsed metadata lookup."""

    def test_stat_returns_stored_object(self, adapter, mock_s3):
        mock_s3.head_object.return_value = {"ContentType": "image/webp", "ContentLength": 10}

        stored = adapter.stat("content/uploads/a.webp")

        assert stored == StoredObject(
            key="content/uploads/a.webp",
            public_url=f"{PUBLIC_DOMAIN}/content/uploads/a.webp",
            content_type="image/webp",
            size=10,
        )

    def test_stat_raises_not_found(self, adapter, mock_s3):
        mock_s3.head_object.side_effect = client_error("404", "HeadObject", status=404)

        with pytest.raises(NotFoundError):
            adapter.stat("a.webp")


class TestSave:
    """Test the upload pipeline."""

    def test_end_to_end_wide_png(self, adapter, uploads, make_image_file):
        """Test 2000x1000 PNG -> 1280x640 WebP under a dated key."""
        path = make_image_file(2000, 1000)

        url = adapter.save({"path": str(path), "name": "photo.png"})

        match = re.fullmatch(re.escape(PUBLIC_DOMAIN) + "/(" + KEY_PATTERN + ")", url)
        assert match is not None

        upload = uploads[match.group(1)]
        assert upload["bucket"] == "b"
        assert upload["extra_args"] == {
            "ContentType": "image/webp",
            "CacheControl": "max-age=31536000",
        }

        stored = Image.open(BytesIO(upload["data"]))
        assert stored.format == "WEBP"
        assert stored.size == (1280, 640)

    def test_small_image_is_not_upscaled(self, adapter, uploads, make_image_file):
        path = make_image_file(300, 150, fmt="JPEG", name="small.jpg")

        adapter.save(UploadedImage(path=path))

        (upload,) = uploads.values()
        assert Image.open(BytesIO(upload["data"])).size == (300, 150)

    def test_key_uses_processing_date(self, adapter, uploads, make_image_file):
        adapter.save(UploadedImage(path=make_image_file(10, 10)))

        (key,) = uploads.keys()
        assert key.startswith("content/uploads/2024/06/01/")

    def test_same_input_twice_gives_two_keys(self, adapter, uploads, make_image_file):
        path = make_image_file(50, 50)

        first = adapter.save(UploadedImage(path=path))
        second = adapter.save(UploadedImage(path=path))

        assert first != second
        assert len(uploads) == 2

    def test_accepts_host_objects(self, adapter, uploads, make_image_file):
        """Test that any object with a path attribute is accepted."""
        path = make_image_file(20, 20)

        url = adapter.save(SimpleNamespace(path=str(path), name="a.png", type="image/png"))

        assert url.startswith(f"{PUBLIC_DOMAIN}/content/uploads/")
        assert len(uploads) == 1

    def test_corrupt_image_is_not_uploaded(self, adapter, mock_s3, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image at all")

        with pytest.raises(TranscodeError):
            adapter.save(UploadedImage(path=path))

        mock_s3.upload_fileobj.assert_not_called()

    def test_missing_file_is_not_uploaded(self, adapter, mock_s3, tmp_path):
        with pytest.raises(TranscodeError):
            adapter.save(UploadedImage(path=tmp_path / "gone.png"))

        mock_s3.upload_fileobj.assert_not_called()

    def test_upload_failure_propagates(self, adapter, mock_s3, make_image_file):
        mock_s3.upload_fileobj.side_effect = EndpointConnectionError(endpoint_url="https://example.com")

        with pytest.raises(TransportError):
            adapter.save(UploadedImage(path=make_image_file(20, 20)))

    def test_accepts_string_path(self, adapter, uploads, make_image_file):
        """Test that an UploadedImage built with a plain string path saves."""
        path = make_image_file(20, 20)

        url = adapter.save(UploadedImage(path=str(path)))

        assert url.startswith(f"{PUBLIC_DOMAIN}/content/uploads/")
        assert len(uploads) == 1

    def test_host_file_is_left_in_place(self, adapter, uploads, make_image_file):
        """Test that the host-owned input file is not removed."""
        path = make_image_file(20, 20)

        adapter.save(UploadedImage(path=path))

        assert path.exists()

    def test_uses_injected_transcoder(self, storage_config, object_store, uploads, make_image_file):
        transcoder = MagicMock()
        transcoder.image_format.extension = "webp"
        transcoder.transcode.return_value = SimpleNamespace(
            data=b"encoded",
            width=1,
            height=1,
            size=7,
            content_type="image/webp",
        )
        adapter = MediaStorageAdapter(storage_config, client=object_store, transcoder=transcoder)

        adapter.save(UploadedImage(path=make_image_file(5, 5)))

        (upload,) = uploads.values()
        assert upload["data"] == b"encoded"


class TestDelete:
    """Test delete collapsing to a boolean."""

    def test_successful_delete(self, adapter, mock_s3):
        assert adapter.delete("content/uploads/a.webp") is True
        mock_s3.delete_object.assert_called_once_with(Bucket="b", Key="content/uploads/a.webp")

    @pytest.mark.parametrize(
        "error",
        [
            client_error("NoSuchKey", "DeleteObject", status=404),
            client_error("AccessDenied", "DeleteObject", status=403),
            EndpointConnectionError(endpoint_url="https://example.com"),
        ],
    )
    def test_every_failure_is_false(self, adapter, mock_s3, error):
        mock_s3.delete_object.side_effect = error

        assert adapter.delete("content/uploads/a.webp") is False

    def test_remove_distinguishes_not_found(self, adapter, mock_s3):
        mock_s3.delete_object.side_effect = client_error("NoSuchKey", "DeleteObject", status=404)

        with pytest.raises(NotFoundError):
            adapter.remove("content/uploads/a.webp")


class TestRead:
    """Test reads collapsing to None."""

    def test_returns_exact_bytes(self, adapter, mock_s3):
        mock_s3.get_object.return_value = {"Body": streaming_body(b"\x00webp\xff")}

        body = adapter.read("content/uploads/a.webp")

        assert body.read() == b"\x00webp\xff"

    def test_missing_key_returns_none(self, adapter, mock_s3):
        mock_s3.get_object.side_effect = client_error("NoSuchKey", status=404)

        assert adapter.read("content/uploads/a.webp") is None

    def test_transport_failure_returns_none(self, adapter, mock_s3):
        mock_s3.get_object.side_effect = client_error("InternalError", status=500)

        assert adapter.read("content/uploads/a.webp") is None


class TestUploadedImage:
    """Test coercion of host image references."""

    def test_from_mapping(self):
        image = UploadedImage.from_host({"path": "/tmp/a.png", "name": "a.png", "type": "image/png"})

        assert image == UploadedImage(path=Path("/tmp/a.png"), name="a.png", type="image/png")

    def test_from_path(self):
        assert UploadedImage.from_host("/tmp/a.png").path == Path("/tmp/a.png")

    def test_string_path_is_coerced(self):
        assert UploadedImage(path="/tmp/a.png").path == Path("/tmp/a.png")

    def test_missing_path_raises(self):
        with pytest.raises(TranscodeError):
            UploadedImage.from_host({"name": "a.png"})

    def test_save_without_path_is_not_uploaded(self, adapter, mock_s3):
        with pytest.raises(TranscodeError):
            adapter.save({"name": "a.png"})

        mock_s3.upload_fileobj.assert_not_called()
