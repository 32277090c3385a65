"""
MongoDB Connection Utility

MongoDB stores:
- Payment history: one document per gateway interaction
  (session requested, gateway response, failure, every webhook callback)

WHY MongoDB for these?
- Schema-flexible: gateway payloads vary by payment method
- Append-only log: no joins, each document is self-contained
- PostgreSQL stays the source of truth for subscription/transaction status
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the document database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection."""
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
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "payment_history": "payment_history",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # History lookups are by transaction, newest first
    db[COLLECTIONS["payment_history"]].create_index([
        ("transaction_id", 1),
        ("created_at", -1)
    ])
    db[COLLECTIONS["payment_history"]].create_index("order_id")

    logger.info("MongoDB indexes created successfully")
