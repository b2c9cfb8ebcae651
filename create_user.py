import asyncio
from config import config
from database import create_client, get_database
from models.user import UserModel

async def add_user(email: str, name: str, role: str):
    client = create_client(config)
    db = get_database(client, config)
    try:
        # Check if exists
        existing = await db.users.find_one({"email": email})
        if existing:
            print(f"User {email} already exists.")
            return

        new_user = UserModel(email=email, name=name, role=role)
        await db.users.insert_one(new_user.model_dump())
        print(f"✅ Successfully added user: {email} ({role}) id={new_user.id}")
    finally:
        client.close()

if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description='Add a user account')
    parser.add_argument('email', type=str, help='Email address')
    parser.add_argument('--name', type=str, default='Admin User', help='User name')
    parser.add_argument('--role', type=str, default='admin', choices=['admin', 'manager', 'user'], help='User role')

    args = parser.parse_args()
    asyncio.run(add_user(args.email, args.name, args.role))
