"""
Media storage adapter backed by an S3-compatible object store.

The adapter exposes the five operations a host content system calls on its
storage backend:

- exists(filename): metadata-only existence check
- save(image): transcode an uploaded image and store it under a fresh key
- serve(): HTTP handler that streams stored objects back to clients
- delete(filename): remove an object
- read(filename): open an object as a byte stream

Read-side operations degrade to booleans/None because the host interface has
no richer error channel; save() always raises on failure. The uncollapsed
operations (stat, open, remove) raise typed errors for callers that need
to tell a missing key from a failed call.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Union

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from loguru import logger

from media_storage.core.config import StorageConfig, load_storage_config
from media_storage.core.errors import MediaStorageError, NotFoundError, TranscodeError
from media_storage.core.models import StoredObject, UploadedImage
from media_storage.imaging.transcoder import ImageTranscoder
from media_storage.storage.s3_client import ObjectStoreClient

KEY_PREFIX = "content/uploads"

# Read size used when streaming objects to HTTP clients
STREAM_CHUNK_SIZE = 64 * 1024

NOT_FOUND_BODY = "File not found"

# Response headers copied from GetObject when present
PASSTHROUGH_HEADERS = {
    "ContentLength": "content-length",
    "CacheControl": "cache-control",
    "ETag": "etag",
}


def _iter_body(body: Any, chunk_size: int) -> Iterator[bytes]:
    """Yield a streaming body chunk by chunk, closing it when done."""
    try:
        yield from body.iter_chunks(chunk_size)
    finally:
        body.close()


class MediaStorageAdapter:
    """
    Storage adapter that keeps uploaded media in an S3-compatible bucket.

    Configuration is validated once at construction and never changes. The
    object store client is created once and shared by all operations.

    Attributes:
        config: Validated adapter configuration
        bucket: Bucket name
        domain: Public domain used to build URLs
        client: Object store client
        transcoder: Image transcoder applied on save
    """

    def __init__(
        self,
        config: Union[StorageConfig, Mapping[str, Any]],
        client: Optional[ObjectStoreClient] = None,
        transcoder: Optional[ImageTranscoder] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            config: StorageConfig or a mapping in the host's config shape
            client: Object store client; built from config when omitted
            transcoder: Image transcoder; built from config when omitted
            clock: Returns the current processing time (local time by default)

        Raises:
            ConfigurationError: If any required configuration is missing
        """
        self.config = load_storage_config(config)
        self.bucket = self.config.bucket
        self.domain = self.config.public_domain

        if client is None:
            client = ObjectStoreClient(
                endpoint_url=self.config.endpoint,
                access_key_id=self.config.access_key_id,
                secret_access_key=self.config.secret_access_key,
                bucket_name=self.config.bucket,
                region=self.config.region,
            )
        self.client = client

        if transcoder is None:
            transcoder = ImageTranscoder(
                max_width=self.config.max_width,
                image_format=self.config.image_format,
                quality=self.config.quality,
            )
        self.transcoder = transcoder

        self._clock = clock
        self._handler: Optional[Callable[[Request], Response]] = None

        logger.info(f"Initialized MediaStorageAdapter for bucket: {self.bucket}")

    def generate_key(self, now: Optional[datetime] = None) -> str:
        """
        Generate a unique object key for a new upload.

        Format: content/uploads/YYYY/MM/DD/<uuid4>.<ext>, dated with the
        process's local date.

        Args:
            now: Processing time; defaults to the adapter clock

        Returns:
            Object key
        """
        now = now or self._clock()
        extension = self.transcoder.image_format.extension
        return f"{KEY_PREFIX}/{now:%Y/%m/%d}/{uuid.uuid4()}.{extension}"

    def public_url(self, key: str) -> str:
        """Build the public URL for a key."""
        return f"{self.domain}/{key}"

    def stat(self, key: str) -> StoredObject:
        """
        Look up an object's metadata.

        Args:
            key: Object key

        Returns:
            StoredObject describing the object

        Raises:
            NotFoundError: If the object does not exist
            TransportError: For any other failure
        """
        head = self.client.head_object(key)
        return StoredObject(
            key=key,
            public_url=self.public_url(key),
            content_type=head.get("ContentType"),
            size=head.get("ContentLength"),
        )

    def open(self, key: str) -> Dict[str, Any]:
        """
        Fetch an object without reading its body.

        Raises:
            NotFoundError: If the object does not exist
            TransportError: For any other failure
        """
        return self.client.get_object(key)

    def remove(self, key: str) -> None:
        """
        Delete an object.

        Raises:
            NotFoundError: If the store reports the object absent
            TransportError: For any other failure
        """
        self.client.delete_object(key)
        logger.info(f"Deleted object: {key}")

    def exists(self, filename: str) -> bool:
        """
        Check whether an object exists.

        Only an explicit "not found" from the store yields False. Any other
        failure (auth, network, timeout) is reported as True so that an
        unknown state never lets the host overwrite or re-create a file.

        Args:
            filename: Object key

        Returns:
            False if the store reports the key absent, True otherwise
        """
        try:
            self.stat(filename)
            return True
        except NotFoundError:
            return False
        except MediaStorageError as e:
            logger.warning(f"Existence check failed for {filename}, assuming it exists: {e}")
            return True

    def save(self, image: Union[UploadedImage, Mapping[str, Any], Any]) -> str:
        """
        Transcode an uploaded image and store it.

        Steps:
        1. Generate a fresh date-partitioned key
        2. Read the uploaded file from its local path
        3. Resize to the configured maximum width and re-encode
        4. Upload with a long-lived Cache-Control
        5. Return the public URL

        Args:
            image: Host image reference; only its path is used

        Returns:
            Public URL of the stored object

        Raises:
            TranscodeError: If the file cannot be read or transcoded
            TransportError: If the upload fails
        """
        upload = UploadedImage.from_host(image)
        key = self.generate_key()

        try:
            data = Path(upload.path).read_bytes()
        except OSError as e:
            raise TranscodeError(f"Failed to read upload {upload.path}: {e}") from e

        try:
            transcoded = self.transcoder.transcode(data)
        except TranscodeError as e:
            logger.error(f"Rejected upload {upload.name or upload.path}: {e}")
            raise

        try:
            self.client.upload_bytes(
                key,
                transcoded.data,
                content_type=transcoded.content_type,
                cache_control=self.config.cache_control,
            )
        except MediaStorageError as e:
            logger.error(f"Upload failed for {key}: {e}")
            raise

        url = self.public_url(key)
        logger.info(
            f"Stored {upload.name or upload.path.name} as {key} "
            f"({transcoded.width}x{transcoded.height}, {transcoded.size} bytes)"
        )
        return url

    def serve(self) -> Callable[[Request], Response]:
        """
        Return the HTTP handler that streams stored objects.

        The handler takes the key from the request path (one leading "/"
        stripped) and streams the object body in chunks. A missing key gets
        a plain-text 404; any other failure is raised into the host's
        exception handlers without writing a response.

        Returns:
            Request handler bound to this adapter
        """
        if self._handler is None:
            self._handler = self._build_handler()
        return self._handler

    def _build_handler(self) -> Callable[[Request], Response]:
        def handler(request: Request) -> Response:
            # Decoded path; request.url would split an encoded "?" or "#" off the key
            key = request.scope["path"]
            if key.startswith("/"):
                key = key[1:]

            try:
                response = self.client.get_object(key)
            except NotFoundError:
                logger.debug(f"Serve miss: {key}")
                return PlainTextResponse(NOT_FOUND_BODY, status_code=404)

            headers = {
                header: str(response[field])
                for field, header in PASSTHROUGH_HEADERS.items()
                if response.get(field) is not None
            }
            return StreamingResponse(
                _iter_body(response["Body"], STREAM_CHUNK_SIZE),
                media_type=response.get("ContentType") or "application/octet-stream",
                headers=headers,
            )

        return handler

    def delete(self, filename: str) -> bool:
        """
        Delete an object.

        Every failure, including a missing key, collapses to False since the
        host interface cannot carry error details. Use remove() to tell
        the cases apart.

        Args:
            filename: Object key

        Returns:
            True if the delete call succeeded, False otherwise
        """
        try:
            self.remove(filename)
            return True
        except MediaStorageError as e:
            logger.warning(f"Delete failed for {filename}: {e}")
            return False

    def read(self, filename: str) -> Optional[Any]:
        """
        Open an object as a byte stream.

        Args:
            filename: Object key

        Returns:
            The object's streaming body, or None on any error
        """
        try:
            return self.open(filename)["Body"]
        except MediaStorageError as e:
            logger.debug(f"Read failed for {filename}: {e}")
            return None
