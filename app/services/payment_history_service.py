"""
Payment History Service - append-only log of gateway interactions in MongoDB.

One document per event:
- requested   : we are about to call the gateway (plan, duration, amount)
- pending     : gateway answered with a Snap token
- failed      : gateway call failed
- <status>    : every webhook notification, keyed by its transaction_status

The relational store holds the authoritative status. A failed history write
is logged and swallowed so it never breaks a payment.
"""

import logging
from typing import Optional, List

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.db.mongodb import get_collection, COLLECTIONS
from app.models import utcnow

logger = logging.getLogger(__name__)


class PaymentHistoryService:

    def __init__(self, collection: Optional[Collection] = None):
        self.collection = collection if collection is not None else get_collection(COLLECTIONS["payment_history"])

    def record(self, transaction_id: int, order_id: str, status: str, metadata: Optional[dict] = None) -> bool:
        """Append a history entry. Returns False if the write failed."""
        doc = {
            "transaction_id": transaction_id,
            "order_id": order_id,
            "status": status,
            "metadata": dict(metadata) if metadata else {},
            "created_at": utcnow(),
        }
        try:
            self.collection.insert_one(doc)
            return True
        except PyMongoError as e:
            logger.warning("Could not record payment history for %s (%s): %s", order_id, status, e)
            return False

    def get_by_transaction(self, transaction_id: int) -> List[dict]:
        """History entries for a transaction, newest first."""
        cursor = self.collection.find(
            {"transaction_id": transaction_id},
            {"_id": 0, "status": 1, "metadata": 1, "created_at": 1},
        ).sort("created_at", -1)
        return list(cursor)


def get_payment_history_service() -> PaymentHistoryService:
    """FastAPI dependency."""
    return PaymentHistoryService()
