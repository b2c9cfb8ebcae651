import asyncio
import sys
from config import config
from database import create_client, get_database
from routes.deps import create_access_token
from logging_config import setup_logging

setup_logging()

async def get_token(email: str = None):
    client = create_client(config)
    db = get_database(client, config)
    try:
        user = await db.users.find_one({"email": email} if email else {})
        if user:
            token = create_access_token({"sub": user["id"], "role": user["role"]})
            print(f"TOKEN={token}")
            print(f"USER_ID={user['id']}")
            print(f"ROLE={user['role']}")
        else:
            print("No users found")
    finally:
        client.close()

if __name__ == "__main__":
    asyncio.run(get_token(sys.argv[1] if len(sys.argv) > 1 else None))
