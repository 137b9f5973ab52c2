"""Value objects passed between the adapter, transcoder and host."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from media_storage.core.errors import TranscodeError


@dataclass(frozen=True)
class UploadedImage:
    """
    Reference to a file the host has just received.

    Only ``path`` is used by the adapter; ``name`` and ``type`` are the
    original filename and MIME type the host may attach.

    Attributes:
        path: Local path of the uploaded file (owned by the host)
        name: Original filename, if known
        type: MIME type reported by the client, if known
    """

    path: Path
    name: Optional[str] = None
    type: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    @classmethod
    def from_host(cls, image: Union["UploadedImage", Mapping[str, Any], Any]) -> "UploadedImage":
        """
        Coerce whatever the host passed to save() into an UploadedImage.

        Accepts an UploadedImage, a mapping with a ``path`` key, a bare path,
        or any object exposing a ``path`` attribute.

        Args:
            image: Host-provided image reference

        Returns:
            UploadedImage

        Raises:
            TranscodeError: If no path can be found
        """
        if isinstance(image, cls):
            return image
        if isinstance(image, (str, Path)):
            return cls(path=Path(image))
        if isinstance(image, Mapping):
            path = image.get("path")
            name = image.get("name")
            mime_type = image.get("type")
        else:
            path = getattr(image, "path", None)
            name = getattr(image, "name", None)
            mime_type = getattr(image, "type", None)

        if not path:
            raise TranscodeError("Uploaded image has no path")
        return cls(path=Path(path), name=name, type=mime_type)


@dataclass(frozen=True)
class TranscodedImage:
    """
    Output of the image transcoder.

    Attributes:
        data: Encoded image bytes
        width: Output width in pixels
        height: Output height in pixels
        format: Pillow format name (e.g. "WEBP")
        content_type: MIME type of ``data``
        extension: File extension for keys, without the dot
    """

    data: bytes
    width: int
    height: int
    format: str
    content_type: str
    extension: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StoredObject:
    """
    An object held by the object store.

    The public URL is always derived from the configured public domain and
    the key; it is never stored.

    Attributes:
        key: Object key (e.g. content/uploads/2024/06/01/<uuid>.webp)
        public_url: URL under the configured public domain
        content_type: MIME type recorded with the object
        size: Object size in bytes, when known
    """

    key: str
    public_url: str
    content_type: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert stored object to dictionary."""
        return {
            "key": self.key,
            "public_url": self.public_url,
            "content_type": self.content_type,
            "size": self.size,
        }
