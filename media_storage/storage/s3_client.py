"""S3-compatible object store client.

This module provides ObjectStoreClient, a thin wrapper around a boto3 S3
client bound to a single bucket. It works with any S3-compatible service
(Cloudflare R2, MinIO, AWS S3) reached through a custom endpoint.

Key features:
- Signature v4 request signing with the "auto" region wildcard
- Multipart-aware uploads through the boto3 transfer manager
- Translation of botocore errors into NotFoundError / TransportError
"""

from io import BytesIO
from typing import Any, Dict, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from media_storage.core.errors import NotFoundError, TransportError

# Error codes the store uses to say a key does not exist
NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchKey"})

# Bodies above this size are sent as multipart uploads
MULTIPART_THRESHOLD = 8 * 1024 * 1024


class ObjectStoreClient:
    """S3-compatible storage client bound to one bucket.

    The underlying boto3 client is thread-safe and pools connections, so one
    instance is shared by every operation of an adapter.

    Attributes:
        bucket_name: Name of the bucket holding all objects
        _s3: Boto3 S3 client instance
    """

    def __init__(
        self,
        endpoint_url: str,
        access_key_id: str,
        secret_access_key: str,
        bucket_name: str,
        region: str = "auto",
        client: Optional[Any] = None,
    ) -> None:
        """Initialize ObjectStoreClient.

        The bucket is expected to exist; this client never creates buckets.

        Args:
            endpoint_url: S3 endpoint URL (e.g. https://<account>.r2.cloudflarestorage.com)
            access_key_id: Access key ID
            secret_access_key: Secret access key
            bucket_name: Name of bucket to use for storage
            region: Signing region ("auto" for custom endpoints)
            client: Pre-built boto3 S3 client, used instead of creating one
        """
        self.bucket_name = bucket_name

        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                config=Config(signature_version="s3v4"),
            )
        self._s3 = client
        self._transfer_config = TransferConfig(multipart_threshold=MULTIPART_THRESHOLD)

    @staticmethod
    def _translate_error(error: Exception, key: str, operation: str) -> Exception:
        """Map a botocore exception onto the adapter's error taxonomy.

        Args:
            error: Exception raised by boto3
            key: Object key of the failed call
            operation: Object store operation name

        Returns:
            NotFoundError when the store reports the key absent, otherwise
            TransportError
        """
        if isinstance(error, ClientError):
            error_code = error.response.get("Error", {}).get("Code", "")
            if error_code in NOT_FOUND_CODES:
                return NotFoundError(key)
        return TransportError(key, operation, cause=error)

    def head_object(self, key: str) -> Dict[str, Any]:
        """Fetch object metadata without the body.

        Args:
            key: Object key

        Returns:
            HeadObject response (ContentType, ContentLength, ...)

        Raises:
            NotFoundError: If the object does not exist
            TransportError: For any other failure
        """
        try:
            return self._s3.head_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key, "HeadObject") from e

    def get_object(self, key: str) -> Dict[str, Any]:
        """Fetch an object; the body is returned as an unread stream.

        Args:
            key: Object key

        Returns:
            GetObject response whose "Body" is a botocore StreamingBody

        Raises:
            NotFoundError: If the object does not exist
            TransportError: For any other failure
        """
        try:
            return self._s3.get_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key, "GetObject") from e

    def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        """Upload an in-memory body.

        The transfer manager switches to a multipart upload once the body
        exceeds MULTIPART_THRESHOLD.

        Args:
            key: Object key to write
            data: Object body
            content_type: Content-Type stored with the object
            cache_control: Optional Cache-Control stored with the object

        Raises:
            TransportError: If the upload fails
        """
        extra_args: Dict[str, Any] = {"ContentType": content_type}
        if cache_control:
            extra_args["CacheControl"] = cache_control

        try:
            self._s3.upload_fileobj(
                BytesIO(data),
                self.bucket_name,
                key,
                ExtraArgs=extra_args,
                Config=self._transfer_config,
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise TransportError(key, "PutObject", cause=e) from e

    def delete_object(self, key: str) -> None:
        """Delete an object.

        Args:
            key: Object key to delete

        Raises:
            NotFoundError: If the store reports the object absent
            TransportError: For any other failure
        """
        try:
            self._s3.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key, "DeleteObject") from e
