import logging

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorClient
from filegate.core.config import settings
from filegate.services.metadata import MetadataStore
import certifi

logger = logging.getLogger(__name__)

class Database:
    """The process-wide Mongo client and the database holding file records."""

    client: AsyncIOMotorClient = None
    db = None

    def connect(self):
        self.client = AsyncIOMotorClient(settings.MONGO_URI, tlsCAFile=certifi.where())
        self.db = self.client[settings.MONGO_DB_NAME]
        logger.info("Connected to MongoDB %s, file records in %s", settings.MONGO_DB_NAME, settings.METADATA_TABLE)

    @property
    def files(self) -> MetadataStore:
        return metadata_store_for(self.db)

    def close(self):
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")

db = Database()


def metadata_store_for(database) -> MetadataStore:
    return MetadataStore(database[settings.METADATA_TABLE])

async def get_db():
    return db.db

async def get_metadata_store(database = Depends(get_db)) -> MetadataStore:
    return metadata_store_for(database)
