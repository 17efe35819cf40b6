from typing import Optional

from pymongo import ReturnDocument
from filegate.models.file import FileRecord, FileStatus

# _id is Mongo's own key; callers only ever see fileId
_PROJECTION = {"_id": 0}


class MetadataStore:
    """File records in a single Mongo collection, keyed by ``fileId``."""

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self):
        await self.collection.create_index("fileId", unique=True)

    async def put(self, record: FileRecord) -> None:
        await self.collection.insert_one(record.to_document())

    async def get(self, file_id: str) -> Optional[dict]:
        return await self.collection.find_one({"fileId": file_id}, _PROJECTION)

    async def mark_ready(self, file_id: str, size_bytes: Optional[int], content_type: str) -> Optional[dict]:
        """Move an UPLOADING record to READY. Returns None if it was not UPLOADING."""
        return await self.collection.find_one_and_update(
            {"fileId": file_id, "status": FileStatus.UPLOADING.value},
            {"$set": {
                "status": FileStatus.READY.value,
                "sizeBytes": size_bytes,
                "contentType": content_type,
            }},
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )

    async def increment_download_count(self, file_id: str) -> Optional[dict]:
        # $inc starts a missing counter at 0
        return await self.collection.find_one_and_update(
            {"fileId": file_id, "status": FileStatus.READY.value},
            {"$inc": {"downloadCount": 1}},
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
