"""FastAPI host for the media storage adapter.

This package exposes the adapter over HTTP: uploads, streaming of stored
objects, existence checks and deletes.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
