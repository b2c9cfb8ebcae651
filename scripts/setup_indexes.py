import sys
import os
import asyncio
from pymongo import ASCENDING, DESCENDING

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from database import create_client, get_database
from logging_config import get_logger, setup_logging

logger = get_logger("setup_indexes")

async def create_indexes(db):
    print("🚀 Starting Index Creation...")

    # --- Tasks ---
    print("\n📦 Tasks Collection:")
    await db.tasks.create_index([("id", ASCENDING)], unique=True)
    print("✅ Created index: (id UNIQUE)")

    # Visibility clause: $or [{created_by: me}, {assigned_to: me}]
    await db.tasks.create_index([("created_by", ASCENDING)])
    print("✅ Created index: (created_by)")
    await db.tasks.create_index([("assigned_to", ASCENDING)])
    print("✅ Created index: (assigned_to)")

    # Filters and default sort
    await db.tasks.create_index([("status", ASCENDING)])
    print("✅ Created index: (status)")
    await db.tasks.create_index([("priority", ASCENDING)])
    print("✅ Created index: (priority)")
    await db.tasks.create_index([("due_date", ASCENDING)])
    print("✅ Created index: (due_date)")
    await db.tasks.create_index([("created_at", DESCENDING)])
    print("✅ Created index: (created_at DESC)")

    # --- Notifications ---
    print("\n📦 Notifications Collection:")
    # For Unread Count: find({recipient: X, is_read: False})
    await db.notifications.create_index([("recipient", ASCENDING), ("is_read", ASCENDING)])
    print("✅ Created index: (recipient, is_read)")

    # For List Notifications: find({recipient: X}).sort(created_at: -1)
    await db.notifications.create_index([("recipient", ASCENDING), ("created_at", DESCENDING)])
    print("✅ Created index: (recipient, created_at DESC)")

    # --- Users ---
    print("\n📦 Users Collection:")
    await db.users.create_index([("id", ASCENDING)], unique=True)
    print("✅ Created index: (id UNIQUE)")
    await db.users.create_index([("email", ASCENDING)], unique=True)
    print("✅ Created index: (email UNIQUE)")

    print("\n✨ All indexes created successfully!")
    logger.info("Indexes ensured", extra={"data": {"db": db.name, "collections": ["tasks", "notifications", "users"]}})

async def main():
    client = create_client(config)
    try:
        await create_indexes(get_database(client, config))
    finally:
        client.close()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
