"""CLI entry point for the media storage adapter.

Usage:
    # Transcode and store an image, printing its public URL
    python -m media_storage upload photo.png

    # Check for / delete an object
    python -m media_storage exists content/uploads/2024/06/01/<uuid>.webp
    python -m media_storage delete content/uploads/2024/06/01/<uuid>.webp

    # Download an object
    python -m media_storage fetch content/uploads/2024/06/01/<uuid>.webp out.webp

    # Run the HTTP server
    python -m media_storage serve
"""

import shutil
import sys
from pathlib import Path

import click
from loguru import logger

from media_storage import __version__
from media_storage.core.config import get_settings
from media_storage.core.errors import ConfigurationError, MediaStorageError
from media_storage.core.logging_config import configure_logging
from media_storage.core.models import UploadedImage
from media_storage.storage.adapter import MediaStorageAdapter


def _build_adapter() -> MediaStorageAdapter:
    """Build an adapter from settings, exiting with status 2 if unconfigured."""
    try:
        return MediaStorageAdapter(get_settings().storage_config())
    except ConfigurationError as e:
        logger.error(f"Storage is not configured: {e}")
        sys.exit(2)


@click.group()
def cli() -> None:
    """Media storage - S3-compatible storage for uploaded images."""
    configure_logging(get_settings().log_level)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def upload(path: Path) -> None:
    """Transcode and store an image.

    Prints the public URL of the stored object.

    Args:
        path: Local image file

    Example:
        python -m media_storage upload photo.png
    """
    adapter = _build_adapter()
    try:
        url = adapter.save(UploadedImage(path=path, name=path.name))
    except MediaStorageError as e:
        logger.error(f"Upload failed: {e}")
        sys.exit(1)
    click.echo(url)


@cli.command()
@click.argument("key")
def exists(key: str) -> None:
    """Check whether an object exists (exit code 1 if it does not)."""
    found = _build_adapter().exists(key)
    click.echo("true" if found else "false")
    if not found:
        sys.exit(1)


@cli.command()
@click.argument("key")
def delete(key: str) -> None:
    """Delete an object (exit code 1 if the delete failed)."""
    deleted = _build_adapter().delete(key)
    click.echo("deleted" if deleted else "not deleted")
    if not deleted:
        sys.exit(1)


@cli.command()
@click.argument("key")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
def fetch(key: str, destination: Path) -> None:
    """Download an object to a local file.

    Args:
        key: Object key
        destination: Local path to write
    """
    body = _build_adapter().read(key)
    if body is None:
        logger.error(f"Could not read {key}")
        sys.exit(1)

    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(destination, "wb") as f:
            shutil.copyfileobj(body, f)
    finally:
        body.close()
    click.echo(str(destination))


@cli.command()
def serve() -> None:
    """Run the HTTP server."""
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting HTTP server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "media_storage.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


@cli.command()
def version() -> None:
    """Show version information."""
    click.echo(f"media-storage v{__version__}")
    click.echo("S3-compatible storage adapter for uploaded images")


if __name__ == "__main__":
    cli()
