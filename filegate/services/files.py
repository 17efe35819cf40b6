import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from filegate.core.config import Settings
from filegate.core.validation import require_string, safe_object_name
from filegate.models.file import FileRecord, FileStatus
from filegate.services.metadata import MetadataStore
from filegate.services.storage import StorageService

logger = logging.getLogger(__name__)

KEY_PREFIX = "uploads"


def _iso_utc(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileService:
    """Upload staging, completion, lookup and sharing of file records.

    Every presigned URL is signed with the same timestamp that the returned
    ``expiresAt`` is computed from, so the advertised expiry matches the
    signature.
    """

    def __init__(self, storage: StorageService, metadata: MetadataStore, settings: Settings):
        self.storage = storage
        self.metadata = metadata
        self.bucket = settings.S3_BUCKET
        self.expires_in = settings.PRESIGN_EXPIRES_SECONDS

    def _expires_at(self, now: datetime) -> int:
        return int(now.timestamp()) + self.expires_in

    async def presign_upload(self, original_filename, content_type) -> dict:
        original_filename = require_string(original_filename, "originalFilename")
        content_type = require_string(content_type, "contentType")

        file_id = str(uuid.uuid4())
        s3_key = f"{KEY_PREFIX}/{file_id}/{safe_object_name(original_filename)}"
        now = datetime.now(timezone.utc)

        # URL first: a signing failure leaves no orphan record behind
        upload_url = self.storage.presign_upload(
            self.bucket, s3_key, self.expires_in, request_date=now
        )

        record = FileRecord(
            fileId=file_id,
            s3Bucket=self.bucket,
            s3Key=s3_key,
            originalFilename=original_filename,
            contentType=content_type,
            status=FileStatus.UPLOADING,
            createdAt=_iso_utc(now),
            expiresAt=self._expires_at(now),
            downloadCount=0,
        )
        await self.metadata.put(record)
        logger.info("Staged upload %s at %s/%s", file_id, self.bucket, s3_key)

        return {
            "fileId": file_id,
            "uploadUrl": upload_url,
            "s3Key": s3_key,
            "expiresAt": record.expiresAt,
        }

    async def complete_upload(self, file_id) -> dict:
        file_id = require_string(file_id, "fileId")

        meta = await self.metadata.get(file_id)
        if not meta:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="fileId not found")
        if meta["status"] != FileStatus.UPLOADING.value:
            logger.warning("Rejected completion of %s in status %s", file_id, meta["status"])
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"invalid status: {meta['status']}")

        head = await self.storage.head_object(meta["s3Bucket"], meta["s3Key"])
        size_bytes = head.size
        content_type = head.content_type or meta["contentType"]

        updated = await self.metadata.mark_ready(file_id, size_bytes, content_type)
        if updated is None:
            # lost a race with another completion
            current = await self.metadata.get(file_id)
            if not current:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="fileId not found")
            logger.warning("Concurrent completion of %s, now %s", file_id, current["status"])
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"invalid status: {current['status']}")

        logger.info("File %s is READY (%s bytes, %s)", file_id, size_bytes, content_type)
        return {"ok": True, "fileId": file_id, "sizeBytes": size_bytes, "contentType": content_type}

    async def get_metadata(self, file_id) -> dict:
        file_id = require_string(file_id, "fileId")

        meta = await self.metadata.get(file_id)
        if not meta:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
        return meta

    async def create_share_link(self, file_id) -> dict:
        file_id = require_string(file_id, "fileId")

        meta = await self.metadata.get(file_id)
        if not meta:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
        if meta["status"] != FileStatus.READY.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"not ready: {meta['status']}")

        now = datetime.now(timezone.utc)
        download_url = self.storage.presign_download(
            meta["s3Bucket"],
            meta["s3Key"],
            meta["originalFilename"],
            self.expires_in,
            request_date=now,
        )

        updated = await self.metadata.increment_download_count(file_id)
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
        logger.info("Issued share link for %s (downloadCount=%s)", file_id, updated.get("downloadCount"))

        return {"fileId": file_id, "downloadUrl": download_url, "expiresAt": self._expires_at(now)}
