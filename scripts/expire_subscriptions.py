#!/usr/bin/env python3
"""
Expire Lapsed Subscriptions

Marks active subscriptions whose end date has passed as expired.
Meant for cron, e.g. hourly:
    0 * * * * cd /srv/jobboard && python scripts/expire_subscriptions.py
"""
import sys
sys.path.insert(0, '.')

from app.core.logging import configure_logging
from app.db.postgres import get_db_session
from app.services.subscription_service import SubscriptionService


def main():
    configure_logging()
    with get_db_session() as db:
        count = SubscriptionService(db).expire_lapsed_subscriptions()
    print(f"Expired {count} subscriptions")


if __name__ == "__main__":
    main()
