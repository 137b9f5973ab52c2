"""Image transcoding for uploaded media."""

from media_storage.imaging.transcoder import ImageTranscoder

__all__ = ["ImageTranscoder"]
