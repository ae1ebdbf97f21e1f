"""
Create the first administrator account.

Usage:
    python scripts/seed_admin.py admin@example.org 'Passw0rd9000!'
"""

import argparse
import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from roadkill.auth.user_manager import UserManager
from roadkill.core.errors import EmailExistsError
from roadkill.db import AsyncSessionLocal, UserRepository, create_schema


async def main(email: str, password: str) -> int:
    await create_schema()

    async with AsyncSessionLocal() as session:
        manager = UserManager(UserRepository(session))
        try:
            user = await manager.create_admin(email, password)
        except EmailExistsError as exc:
            print(str(exc))
            return 1
        await session.commit()

    print(f"Created admin {user.email}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a Roadkill administrator.")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.email, args.password)))
