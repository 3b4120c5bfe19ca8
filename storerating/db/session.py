import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from storerating.core.config import settings

logger = logging.getLogger(__name__)


class MongoConnection:
    """Process-wide database handle, opened on startup and closed on shutdown."""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    def connect(self, url: str = None, db_name: str = None):
        self.client = AsyncIOMotorClient(url or settings.MONGO_URL, maxPoolSize=10, minPoolSize=1)
        self.db = self.client[db_name or settings.DB_NAME]
        logger.info(f"Connected to MongoDB database '{self.db.name}'")
        return self.db

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None


mongo = MongoConnection()


def get_db() -> AsyncIOMotorDatabase:
    if mongo.db is None:
        raise RuntimeError("Database connection has not been initialised")
    return mongo.db


async def ensure_indexes(db):
    """Create the unique indexes the data model relies on"""
    await db.users.create_index([("id", ASCENDING)], unique=True)
    await db.users.create_index([("email", ASCENDING)], unique=True)
    await db.stores.create_index([("id", ASCENDING)], unique=True)
    await db.stores.create_index([("email", ASCENDING)], unique=True)
    await db.stores.create_index([("owner_id", ASCENDING)], unique=True)
    await db.ratings.create_index([("id", ASCENDING)], unique=True)
    await db.ratings.create_index([("user_id", ASCENDING), ("store_id", ASCENDING)], unique=True)
    await db.ratings.create_index([("store_id", ASCENDING)])
    logger.info("Database indexes ensured")
