"""
First-time setup: create the default admin (and optionally sample users).

  python -m book_api.scripts.initial_setup [--admin-password P] [--with-samples]

Does nothing if the users table already has rows; use manage_users for
existing installations.

!! Change the default passwords immediately after the first login !!
"""

import argparse
import asyncio
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from book_api.config import Settings
from book_api.models.user import Role
from book_api.scripts.common import open_session
from book_api.security import PasswordHasher
from book_api.services import user_store

DEFAULT_ADMIN = {
    "username": "admin",
    "email": "admin@bookmanager.com",
    "full_name": "Administrator",
}
DEFAULT_ADMIN_PASSWORD = "Admin@123"

SAMPLE_USERS = [
    {
        "username": "john",
        "email": "john@example.com",
        "password": "John@123",
        "full_name": "John Doe",
    },
    {
        "username": "jane",
        "email": "jane@example.com",
        "password": "Jane@123",
        "full_name": "Jane Smith",
    },
]


async def setup(
    db: AsyncSession,
    hasher: PasswordHasher,
    admin_password: str = DEFAULT_ADMIN_PASSWORD,
    with_samples: bool = False,
) -> bool:
    """
    Seed an empty database.

    Returns:
        True if users were created, False if the database already had users.
    """
    existing = await user_store.count_users(db)
    if existing:
        print(f"Users already exist in the database! Found {existing} user(s).")
        print("To manage existing users, use: python -m book_api.scripts.manage_users")
        return False

    await user_store.create_user(
        db, hasher, password=admin_password, role=Role.ADMIN, **DEFAULT_ADMIN
    )
    print("Admin user created")
    print(f"   Username: {DEFAULT_ADMIN['username']}")
    print("   Permissions: can add, edit, and delete books")

    if with_samples:
        for sample in SAMPLE_USERS:
            await user_store.create_user(db, hasher, role=Role.USER, **sample)
            print(f"User \"{sample['username']}\" created")

    print("\nIMPORTANT: change all default passwords immediately!")
    return True


async def run(args: argparse.Namespace, settings: Settings) -> int:
    hasher = PasswordHasher(time_cost=settings.PASSWORD_HASH_TIME_COST)
    async with open_session(settings) as db:
        await setup(db, hasher, args.admin_password, args.with_samples)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the default Book API users.")
    parser.add_argument("--admin-password", default=DEFAULT_ADMIN_PASSWORD)
    parser.add_argument(
        "--with-samples",
        action="store_true",
        help="Also create two regular sample users",
    )
    args = parser.parse_args(argv)
    return asyncio.run(run(args, Settings()))


if __name__ == "__main__":
    sys.exit(main())
