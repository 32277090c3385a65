#!/usr/bin/env python3
"""
Database Init Script

Creates all tables and seeds the premium feature catalog.
Safe to run repeatedly.
Usage: python scripts/init_db.py
"""
import sys
sys.path.insert(0, '.')

from app.db.postgres import get_db_session, init_db
from app.models import seed_premium_features, DEFAULT_PREMIUM_FEATURES


def main():
    print("[1] Creating tables...")
    init_db()
    print("    ✅ Tables ready")

    print("\n[2] Seeding premium features...")
    with get_db_session() as db:
        added = seed_premium_features(db)
    print(f"    ✅ {added} added, {len(DEFAULT_PREMIUM_FEATURES) - added} already present")


if __name__ == "__main__":
    main()
