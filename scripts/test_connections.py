#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the database connections and Midtrans config.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from app.db.postgres import test_postgres_connection
from app.db.mongodb import test_mongo_connection
from app.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOB BOARD PREMIUM - CONNECTION TEST")
    print("=" * 50)

    # Test relational store
    print("\n[1] Testing database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    # Test MongoDB
    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Midtrans is only checked for configuration, not called
    print("\n[3] Checking Midtrans config...")
    mode = "production" if settings.midtrans_is_production else "sandbox"
    print(f"    Mode: {mode} ({settings.midtrans_base_url})")
    if settings.midtrans_server_key:
        print("    ✅ Server key: configured")
    else:
        print("    ⚠️  Server key: not configured")
    if not settings.midtrans_verify_signature:
        print("    ⚠️  Webhook signature verification is OFF")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
