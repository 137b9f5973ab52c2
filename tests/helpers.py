"""Helpers for building botocore responses, errors and test images."""

from datetime import datetime
from io import BytesIO

from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from PIL import Image

PUBLIC_DOMAIN = "https://cdn.example.com"

# Fixed processing time used by the adapter fixture
PROCESSING_TIME = datetime(2024, 6, 1, 12, 30, 0)

KEY_PATTERN = (
    r"content/uploads/2024/06/01/"
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}\.webp"
)


def client_error(code: str, operation: str = "GetObject", status: int = 400) -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


def streaming_body(data: bytes) -> StreamingBody:
    """Wrap bytes the way boto3 returns GetObject bodies."""
    return StreamingBody(BytesIO(data), len(data))


def image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    """Encode a solid test image."""
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    image = Image.new(mode, (width, height), color=color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()
