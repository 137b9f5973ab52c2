"""Upload, existence and delete endpoints.

These routes are the HTTP face of the adapter's host operations. Serving
stored objects is handled by the adapter's own handler, mounted in
create_app() under the configured serve prefix.
"""

import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile, status

from media_storage.api.dependencies import get_adapter
from media_storage.api.models import (
    DeleteResponse,
    ErrorResponse,
    ExistsResponse,
    UploadResponse,
)
from media_storage.core.models import UploadedImage
from media_storage.storage.adapter import MediaStorageAdapter

router = APIRouter(tags=["Files"])

# Bodies written by the exception handlers registered in create_app()
UNCONFIGURED_RESPONSES = {
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}
UPLOAD_ERROR_RESPONSES = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
    status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
    **UNCONFIGURED_RESPONSES,
}


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses=UPLOAD_ERROR_RESPONSES,
)
def upload_image(
    file: UploadFile = File(..., description="Image to store"),
    adapter: MediaStorageAdapter = Depends(get_adapter),
) -> UploadResponse:
    """Store an uploaded image and return its public URL.

    The upload is spooled to a temporary file, which is removed once the
    adapter has stored the transcoded copy.

    Args:
        file: Multipart file upload
        adapter: Storage adapter (injected)

    Returns:
        UploadResponse: Public URL of the stored image
    """
    suffix = Path(file.filename or "").suffix
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        shutil.copyfileobj(file.file, tmp)
        tmp_path = Path(tmp.name)

    try:
        url = adapter.save(
            UploadedImage(path=tmp_path, name=file.filename, type=file.content_type)
        )
    finally:
        tmp_path.unlink(missing_ok=True)

    return UploadResponse(url=url)


@router.get(
    "/files/{key:path}/exists",
    response_model=ExistsResponse,
    responses=UNCONFIGURED_RESPONSES,
)
def file_exists(
    key: str,
    adapter: MediaStorageAdapter = Depends(get_adapter),
) -> ExistsResponse:
    """Check whether an object exists.

    Example:
        GET /files/content/uploads/2024/06/01/<uuid>.webp/exists
        Response:
        {"key": "content/uploads/2024/06/01/<uuid>.webp", "exists": true}
    """
    return ExistsResponse(key=key, exists=adapter.exists(key))


@router.delete(
    "/files/{key:path}",
    response_model=DeleteResponse,
    responses=UNCONFIGURED_RESPONSES,
)
def delete_file(
    key: str,
    adapter: MediaStorageAdapter = Depends(get_adapter),
) -> DeleteResponse:
    """Delete an object."""
    return DeleteResponse(key=key, deleted=adapter.delete(key))
