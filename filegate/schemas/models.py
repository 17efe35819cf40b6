from pydantic import BaseModel
from typing import Any, Optional

# Request fields are typed loosely so require_string can report
# missing, blank and non-string values with the same message.

class PresignUploadRequest(BaseModel):
    originalFilename: Any = None
    contentType: Any = None

class PresignUploadResponse(BaseModel):
    fileId: str
    uploadUrl: str
    s3Key: str
    expiresAt: int

class CompleteUploadRequest(BaseModel):
    fileId: Any = None

class CompleteUploadResponse(BaseModel):
    ok: bool = True
    fileId: str
    sizeBytes: Optional[int] = None
    contentType: str

class ShareLinkResponse(BaseModel):
    fileId: str
    downloadUrl: str
    expiresAt: int

class VersionResponse(BaseModel):
    version: str

class EnvResponse(BaseModel):
    env: str
