"""
Script to create the metadata collection indexes.
Run this once against a fresh database; the server also ensures them on startup.
"""
import asyncio
from filegate.core.config import settings
from filegate.core.database import db

async def create_indexes():
    print(f"Creating indexes on {settings.MONGO_DB_NAME}.{settings.METADATA_TABLE}...")

    db.connect()

    try:
        # fileId is the primary key of every file record
        await db.files.ensure_indexes()
        print("✅ Created unique index on fileId")
    finally:
        db.close()

if __name__ == "__main__":
    asyncio.run(create_indexes())
