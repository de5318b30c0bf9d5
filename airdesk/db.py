# airdesk/db.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

logger = logging.getLogger(__name__)


def connect(config) -> AsyncIOMotorDatabase:
    client = AsyncIOMotorClient(config.MONGODB_URI)
    # Explicitly pick the database
    return client[config.MONGODB_DB]


async def ensure_indexes(db: AsyncIOMotorDatabase):
    await db["users"].create_index([("email", ASCENDING)], unique=True)
    await db["tickets"].create_index([("ticket_id", ASCENDING)], unique=True)
    await db["tickets"].create_index([("owner_id", ASCENDING)])
    await db["tickets"].create_index([("assigned_to", ASCENDING)])
    logger.info("MongoDB indexes ensured.")
