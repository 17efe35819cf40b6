from enum import Enum
from pydantic import BaseModel
from typing import Optional


class FileStatus(str, Enum):
    UPLOADING = "UPLOADING"
    READY = "READY"


class FileRecord(BaseModel):
    fileId: str
    s3Bucket: str
    s3Key: str
    originalFilename: str
    contentType: str
    status: FileStatus = FileStatus.UPLOADING
    createdAt: str # ISO-8601, UTC
    expiresAt: int # epoch seconds

    # Set on completion
    sizeBytes: Optional[int] = None
    downloadCount: int = 0

    def to_document(self) -> dict:
        # sizeBytes stays absent until the upload is completed
        return self.model_dump(mode="json", exclude_none=True)
