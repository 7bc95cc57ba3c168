"""
Manage users from the command line. Run from project root:

  python -m book_api.scripts.manage_users create --username alice \\
      --email alice@example.com --password 'Secret1!' --full-name "Alice" [--role admin]
  python -m book_api.scripts.manage_users list
  python -m book_api.scripts.manage_users set-role alice admin
  python -m book_api.scripts.manage_users set-password alice 'N3w-secret!'
  python -m book_api.scripts.manage_users delete alice [--yes]

This is the only way to create admin accounts; the /register endpoint always
creates regular users. Passwords must be 6+ characters with a letter, a
digit and a special character.

Role and password changes do not revoke tokens that were already issued.
"""

import argparse
import asyncio
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from book_api.config import Settings
from book_api.exceptions import DuplicateError
from book_api.models.user import Role
from book_api.scripts.common import open_session
from book_api.security import PasswordHasher, check_password_strength
from book_api.services import user_store

WEAK_PASSWORD_MESSAGE = "Password too weak (need 6+ chars, letter, number, special char)"


async def create_user(db: AsyncSession, hasher: PasswordHasher, args: argparse.Namespace) -> int:
    if not check_password_strength(args.password):
        print(WEAK_PASSWORD_MESSAGE, file=sys.stderr)
        return 1

    try:
        user = await user_store.create_user(
            db,
            hasher,
            username=args.username,
            email=args.email,
            password=args.password,
            full_name=args.full_name,
            role=Role(args.role),
        )
    except DuplicateError as exc:
        print(exc.detail, file=sys.stderr)
        return 1

    print("User created!")
    print(f"Username: {user.username}")
    print(f"Email: {user.email}")
    print(f"Role: {user.role.value}")
    return 0


async def list_users(db: AsyncSession, hasher: PasswordHasher, args: argparse.Namespace) -> int:
    users = await user_store.list_users(db)
    if not users:
        print("No users found")
        return 0

    print(f"{'Username':<20}{'Role':<12}Email")
    print("-" * 50)
    for user in users:
        print(f"{user.username:<20}{user.role.value:<12}{user.email}")
    print(f"\nTotal: {len(users)}")
    return 0


async def set_role(db: AsyncSession, hasher: PasswordHasher, args: argparse.Namespace) -> int:
    user = await user_store.find_by_username(db, args.username)
    if user is None:
        print("User not found", file=sys.stderr)
        return 1

    await user_store.update_profile(db, user, role=Role(args.role))
    print("Role updated!")
    print(f"Username: {user.username}")
    print(f"New role: {user.role.value}")
    return 0


async def set_password(db: AsyncSession, hasher: PasswordHasher, args: argparse.Namespace) -> int:
    user = await user_store.find_by_username(db, args.username)
    if user is None:
        print("User not found", file=sys.stderr)
        return 1

    if not check_password_strength(args.password):
        print(WEAK_PASSWORD_MESSAGE, file=sys.stderr)
        return 1

    await user_store.update_password(db, hasher, user, args.password)
    print("Password updated!")
    return 0


async def delete_user(db: AsyncSession, hasher: PasswordHasher, args: argparse.Namespace) -> int:
    user = await user_store.find_by_username(db, args.username)
    if user is None:
        print("User not found", file=sys.stderr)
        return 1

    print(f"Username: {user.username}")
    print(f"Email: {user.email}")
    print(f"Role: {user.role.value}")

    if not args.yes:
        answer = input("Delete? (yes/no): ")
        if answer.strip().lower() != "yes":
            print("Cancelled")
            return 0

    await user_store.delete_user(db, user.id)
    print("User deleted")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage Book API users.")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a user")
    create.add_argument("--username", required=True)
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--full-name", required=True)
    create.add_argument("--role", choices=[r.value for r in Role], default=Role.USER.value)
    create.set_defaults(handler=create_user)

    listing = commands.add_parser("list", help="List users, newest first")
    listing.set_defaults(handler=list_users)

    role = commands.add_parser("set-role", help="Change a user's role")
    role.add_argument("username")
    role.add_argument("role", choices=[r.value for r in Role])
    role.set_defaults(handler=set_role)

    password = commands.add_parser("set-password", help="Change a user's password")
    password.add_argument("username")
    password.add_argument("password")
    password.set_defaults(handler=set_password)

    delete = commands.add_parser("delete", help="Delete a user")
    delete.add_argument("username")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    delete.set_defaults(handler=delete_user)

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    hasher = PasswordHasher(time_cost=settings.PASSWORD_HASH_TIME_COST)
    async with open_session(settings) as db:
        return await args.handler(db, hasher, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args, Settings()))


if __name__ == "__main__":
    sys.exit(main())
