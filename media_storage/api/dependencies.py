"""Adapter construction for the HTTP app.

The adapter is built lazily from Settings on first use and shared by all
requests. Route handlers receive it through FastAPI dependency injection,
so tests can override get_adapter.
"""

from typing import Optional

from media_storage.core.config import get_settings
from media_storage.storage.adapter import MediaStorageAdapter

# Global instance (lazy-loaded)
_adapter: Optional[MediaStorageAdapter] = None


def get_adapter() -> MediaStorageAdapter:
    """Get or create the shared storage adapter.

    Returns:
        MediaStorageAdapter: Adapter configured from environment settings

    Raises:
        ConfigurationError: If storage settings are incomplete
    """
    global _adapter
    if _adapter is None:
        settings = get_settings()
        _adapter = MediaStorageAdapter(settings.storage_config())
    return _adapter


def reset_adapter() -> None:
    """Drop the shared adapter so the next call rebuilds it."""
    global _adapter
    _adapter = None
