"""
Image transcoding for uploaded media.

Every upload is decoded with Pillow, capped to a maximum width (aspect ratio
preserved, never upscaled) and re-encoded in a single output format, WebP
at quality 80 by default.
"""

from io import BytesIO

from loguru import logger
from PIL import Image, ImageOps

from media_storage.core.config import DEFAULT_MAX_WIDTH, DEFAULT_QUALITY, ImageFormat
from media_storage.core.errors import TranscodeError
from media_storage.core.models import TranscodedImage


class ImageTranscoder:
    """
    Resize and re-encode images.

    Instances hold only immutable options, so a single transcoder can be
    shared by concurrent saves; each call works on its own buffers.
    """

    def __init__(
        self,
        max_width: int = DEFAULT_MAX_WIDTH,
        image_format: ImageFormat = ImageFormat.WEBP,
        quality: int = DEFAULT_QUALITY,
    ):
        """
        Initialize image transcoder.

        Args:
            max_width: Maximum output width in pixels
            image_format: Output encoding
            quality: Encoder quality (1-100)
        """
        if max_width <= 0:
            raise ValueError("max_width must be greater than 0")
        if not 1 <= quality <= 100:
            raise ValueError("quality must be between 1 and 100")

        self.max_width = max_width
        self.image_format = ImageFormat(image_format)
        self.quality = quality

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        """
        Compute output dimensions for a source image.

        Args:
            width: Source width
            height: Source height

        Returns:
            (width, height) capped at max_width; sources already narrow
            enough are returned unchanged
        """
        if width <= self.max_width:
            return width, height
        scaled_height = max(1, round(height * self.max_width / width))
        return self.max_width, scaled_height

    def _prepare_mode(self, image: Image.Image) -> Image.Image:
        """Convert to a pixel mode the output format can encode."""
        has_alpha = image.mode in ("RGBA", "LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        )

        if self.image_format is ImageFormat.JPEG or not has_alpha:
            target_mode = "RGB"
        else:
            target_mode = "RGBA"

        if image.mode != target_mode:
            image = image.convert(target_mode)
        return image

    def _save_options(self) -> dict:
        if self.image_format is ImageFormat.PNG:
            # PNG is lossless; quality has no meaning for it
            return {"optimize": True}
        return {"quality": self.quality}

    def transcode(self, data: bytes) -> TranscodedImage:
        """
        Resize and re-encode an image.

        Args:
            data: Raw bytes of the uploaded image

        Returns:
            TranscodedImage with the encoded bytes and output dimensions

        Raises:
            TranscodeError: If the input is empty, corrupt, unsupported or
                cannot be encoded
        """
        if not data:
            raise TranscodeError("Cannot transcode an empty file")

        try:
            with Image.open(BytesIO(data)) as source:
                source.load()
                image = ImageOps.exif_transpose(source)

                source_size = image.size
                new_size = self.target_size(*source_size)
                if new_size != source_size:
                    image = image.resize(new_size, Image.Resampling.LANCZOS)

                image = self._prepare_mode(image)

                output = BytesIO()
                image.save(output, format=self.image_format.pillow_format, **self._save_options())
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            raise TranscodeError(f"Failed to transcode image: {e}") from e

        logger.debug(
            f"Transcoded image {source_size[0]}x{source_size[1]} -> "
            f"{new_size[0]}x{new_size[1]} {self.image_format.pillow_format}"
        )

        return TranscodedImage(
            data=output.getvalue(),
            width=new_size[0],
            height=new_size[1],
            format=self.image_format.pillow_format,
            content_type=self.image_format.content_type,
            extension=self.image_format.extension,
        )
