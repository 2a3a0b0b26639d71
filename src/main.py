"""Command-line entry point for account administration.

Commands:
    init            Create the tables and make sure the default role exists.
    create-user     Create a user with a credentials account.
    show-user       Print a user's profile and visible resources.
    check-password  Check a user's password and record the login time.
"""

import argparse
import getpass
import logging
import sys

from sqlalchemy.orm import Session

from config import DEFAULT_ROLE_ID
from core.database import SessionLocal, init_db
from core.exceptions import UserServiceError
from core.logging_config import setup_logging
from models.role import RoleModel
from schemas.account import CreateAccountRequest
from schemas.user import CreateUserRequest
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def ensure_default_role(db: Session, role_id: str = DEFAULT_ROLE_ID) -> RoleModel:
    """Create the default role if it is missing.

    Args:
        db: Database session.
        role_id: ID (and name) of the default role.

    Returns:
        The existing or newly created role.
    """
    role = db.get(RoleModel, role_id)
    if role:
        return role
    role = RoleModel(id=role_id, name=role_id, description="Default role for new users")
    db.add(role)
    db.commit()
    db.refresh(role)
    logger.info("Created default role: %s", role_id)
    return role


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < MIN_PASSWORD_LENGTH:
            print(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
                file=sys.stderr,
            )
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def cmd_init(args: argparse.Namespace) -> int:
    init_db()
    with SessionLocal() as db:
        role = ensure_default_role(db)
    print(f"Database ready, default role: {role.id}")
    return 0


def cmd_create_user(args: argparse.Namespace) -> int:
    password = prompt_for_password()
    email = args.email.strip().lower()
    new_user = CreateUserRequest(
        email=email,
        password=password,
        password1=password,
        name=args.name,
        display_name=args.display_name,
    )
    account = CreateAccountRequest(provider_account_id=email)
    with SessionLocal() as db:
        try:
            user = UserManager(db).create(new_user, account)
        except UserServiceError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    print(f"Created user {user.id}: <{user.email}>")
    return 0


def cmd_show_user(args: argparse.Namespace) -> int:
    with SessionLocal() as db:
        manager = UserManager(db)
        try:
            profile = manager.get_user_profile_by_email(args.email)
            resources = manager.find_user_resources(args.email)
        except UserServiceError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    print("=" * 70)
    print(f"User: {profile.display_name or profile.name or '-'} <{profile.email}>")
    print(f"Verified: {profile.email_verified_at or 'no'}")
    print(f"Roles: {', '.join(profile.role_names) or '-'}")
    print(f"Permissions: {', '.join(profile.permission_names) or '-'}")
    print(f"Resources ({resources.total}):")
    for resource in resources.items:
        print(f"  {resource.name:<24} {resource.path or ''}")
    print("=" * 70)
    return 0


def cmd_check_password(args: argparse.Namespace) -> int:
    password = getpass.getpass("Password: ")
    with SessionLocal() as db:
        user = UserManager(db).authenticate(args.email.strip().lower(), password)
    if user is None:
        print("Invalid email or password.", file=sys.stderr)
        return 1
    print(f"Password OK for <{user.email}>, login recorded at {user.login_at}")
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User account administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create tables and the default role")
    init_parser.set_defaults(func=cmd_init)

    create_parser = subparsers.add_parser("create-user", help="Create a user")
    create_parser.add_argument("email", help="Unique email address for login")
    create_parser.add_argument("--name", default=None, help="User name")
    create_parser.add_argument("--display-name", default=None, help="Display name")
    create_parser.set_defaults(func=cmd_create_user)

    show_parser = subparsers.add_parser("show-user", help="Show profile and resources")
    show_parser.add_argument("email", help="User email")
    show_parser.set_defaults(func=cmd_show_user)

    check_parser = subparsers.add_parser(
        "check-password", help="Check a password and record the login"
    )
    check_parser.add_argument("email", help="User email")
    check_parser.set_defaults(func=cmd_check_password)

    return parser.parse_args(argv)


def main(argv=None) -> int:
    setup_logging()
    args = parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
