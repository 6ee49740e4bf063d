#!/usr/bin/env python3
"""
Account administration from the command line.

The first admin cannot be created through the API, so it is promoted here.

Usage:
    python scripts/manage_users.py list
    python scripts/manage_users.py promote <user_id>
    python scripts/manage_users.py demote <user_id>
    python scripts/manage_users.py set-tier <user_id> expert
"""
import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from picks_api.core.database import SessionLocal
from picks_api.models import SUBSCRIPTION_TIERS
from picks_api.repositories import UserRepository

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def list_users(repo: UserRepository, limit: int) -> None:
    for user in repo.list_users(limit=limit):
        print(f"{user.id:40} {user.email or '-':35} {user.role:6} {user.subscription_tier}")


def set_fields(repo: UserRepository, user_id: str, **changes) -> int:
    user = repo.update(user_id, changes)
    if user is None:
        logger.error(f"User {user_id} not found")
        return 1
    repo.save()
    logger.info(f"User {user_id} updated: {changes}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage sports picks user accounts")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List users, newest first")
    list_parser.add_argument("--limit", type=int, default=100)

    for name in ("promote", "demote"):
        p = sub.add_parser(name, help=f"{name.capitalize()} a user {'to' if name == 'promote' else 'from'} admin")
        p.add_argument("user_id")

    tier_parser = sub.add_parser("set-tier", help="Set a user's subscription tier")
    tier_parser.add_argument("user_id")
    tier_parser.add_argument("tier", choices=SUBSCRIPTION_TIERS)

    args = parser.parse_args()

    db = SessionLocal()
    try:
        repo = UserRepository(db)
        if args.command == "list":
            list_users(repo, args.limit)
            return 0
        if args.command == "promote":
            return set_fields(repo, args.user_id, role="admin")
        if args.command == "demote":
            return set_fields(repo, args.user_id, role="user")
        return set_fields(repo, args.user_id, subscription_tier=args.tier)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
