from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from minio import Minio
from filegate.core.config import settings


@dataclass
class ObjectInfo:
    size: Optional[int]
    content_type: Optional[str]


class StorageService:
    """Presigned URLs and HEAD lookups against the S3-compatible object store."""

    def __init__(self, client: Optional[Minio] = None):
        self.client = client

    def connect(self):
        # region is fixed so presigning never needs a bucket-location round trip
        self.client = Minio(
            endpoint=settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
            region=settings.AWS_REGION,
        )

    def presign_upload(self, bucket_name: str, object_name: str, expires_in: int,
                       request_date: Optional[datetime] = None) -> str:
        return self.client.get_presigned_url(
            method="PUT",
            bucket_name=bucket_name,
            object_name=object_name,
            expires=timedelta(seconds=expires_in),
            request_date=request_date,
        )

    def presign_download(self, bucket_name: str, object_name: str, filename: str, expires_in: int,
                         request_date: Optional[datetime] = None) -> str:
        quoted = filename.replace("\\", "\\\\").replace('"', '\\"')
        return self.client.presigned_get_object(
            bucket_name=bucket_name,
            object_name=object_name,
            expires=timedelta(seconds=expires_in),
            response_headers={"response-content-disposition": f'attachment; filename="{quoted}"'},
            request_date=request_date,
        )

    async def head_object(self, bucket_name: str, object_name: str) -> ObjectInfo:
        # stat_object raises S3Error when the object is missing; callers let it propagate
        stat = await run_in_threadpool(
            self.client.stat_object, bucket_name=bucket_name, object_name=object_name
        )
        return ObjectInfo(size=stat.size, content_type=stat.content_type)


storage_service = StorageService()

def get_storage() -> StorageService:
    return storage_service
