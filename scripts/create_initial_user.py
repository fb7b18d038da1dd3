"""Utility script to create an initial admin user and print an access token."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import User
from app.domain.entities.user import ROLE_ADMIN
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial admin for the festival push notification API.",
    )
    parser.add_argument(
        "--name",
        default="Administrator",
        help="Full name of the user (default: Administrator)",
    )
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Email of the user (default: admin@example.com)",
    )
    parser.add_argument(
        "--group",
        dest="groups",
        action="append",
        default=[],
        help="Notification group of the user; may be repeated",
    )
    return parser.parse_args()


def main() -> None:
    """Create an admin using the provided command line arguments."""

    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        repository = UserRepository(session)
        user = repository.get_by_email(args.email)
        if user is None:
            user = repository.create(
                User(
                    id=None,
                    name=args.name,
                    email=args.email,
                    role=ROLE_ADMIN,
                    user_groups=list(args.groups),
                )
            )
        elif not user.is_admin():
            raise SystemExit(f"User {args.email} already exists and is not an admin")
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not save the user in the database: {exc}") from exc
    finally:
        session.close()

    print(
        "Admin ready:\n"
        f"  ID: {user.id}\n"
        f"  Name: {user.name}\n"
        f"  Email: {user.email}\n"
        f"  Access token: {create_access_token({'sub': user.id})}"
    )


if __name__ == "__main__":
    main()
