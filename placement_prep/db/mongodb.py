"""
MongoDB Connection Utility

MongoDB stores everything the portal persists:
- users: students, alumni and admins in one collection, discriminated by `role`
- weeklyContent / weeklyTasks: per-category learning material, keyed by (category, week)
- submissions: one graded submission per (studentId, taskId)
- placementExperiences: alumni-written interview reports
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from placement_prep.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS keys for names."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "weekly_content": "weeklyContent",
    "weekly_tasks": "weeklyTasks",
    "submissions": "submissions",
    "experiences": "placementExperiences"
}


def init_mongo_indexes():
    """
    Create indexes. Call this once during app startup.

    The unique index on submissions is what enforces one graded
    submission per (student, task) at write time.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index("role")

    db[COLLECTIONS["weekly_content"]].create_index([("category", ASCENDING), ("week", ASCENDING)])
    db[COLLECTIONS["weekly_tasks"]].create_index([("category", ASCENDING), ("week", ASCENDING)])

    db[COLLECTIONS["submissions"]].create_index([
        ("studentId", ASCENDING),
        ("taskId", ASCENDING)
    ], unique=True)

    db[COLLECTIONS["experiences"]].create_index([("createdAt", DESCENDING)])
    db[COLLECTIONS["experiences"]].create_index("company")

    logger.info("MongoDB indexes created successfully")
