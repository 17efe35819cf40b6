from typing import Optional

from fastapi import APIRouter, Depends
from filegate.schemas.models import (
    PresignUploadRequest, PresignUploadResponse,
    CompleteUploadRequest, CompleteUploadResponse,
    ShareLinkResponse,
)
from filegate.core.config import settings
from filegate.core.database import get_metadata_store
from filegate.services.files import FileService
from filegate.services.metadata import MetadataStore
from filegate.services.storage import StorageService, get_storage

router = APIRouter(prefix="/files", tags=["Files"])


async def get_file_service(
    metadata: MetadataStore = Depends(get_metadata_store),
    storage: StorageService = Depends(get_storage),
) -> FileService:
    return FileService(storage, metadata, settings)


@router.post("/presign-upload", response_model=PresignUploadResponse)
async def presign_upload(
    request: Optional[PresignUploadRequest] = None,
    service: FileService = Depends(get_file_service),
):
    """Stage an upload: returns a presigned PUT URL and records the file as UPLOADING."""
    request = request or PresignUploadRequest()
    return await service.presign_upload(request.originalFilename, request.contentType)

@router.post("/complete", response_model=CompleteUploadResponse)
async def complete_upload(
    request: Optional[CompleteUploadRequest] = None,
    service: FileService = Depends(get_file_service),
):
    """Confirm the object landed in the bucket and mark the file READY."""
    request = request or CompleteUploadRequest()
    return await service.complete_upload(request.fileId)

@router.get("/{fileId}")
async def get_file(
    fileId: str,
    service: FileService = Depends(get_file_service),
):
    # returned as stored, not through a response model
    return await service.get_metadata(fileId)

@router.post("/{fileId}/share", response_model=ShareLinkResponse)
async def share_file(
    fileId: str,
    service: FileService = Depends(get_file_service),
):
    """Generate a temporary presigned GET URL and count the share"""
    return await service.create_share_link(fileId)
