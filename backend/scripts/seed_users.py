"""
Seed demo users so there is someone to chat with.

Usage:
    cd backend
    python -m scripts.seed_users          # Dry-run (shows what will be created)
    python -m scripts.seed_users --apply  # Actually insert data

Existing emails are skipped, so the script can be re-run safely.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

# Suppress noisy SQLAlchemy logs during seed
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine.Engine").setLevel(logging.WARNING)

from parley.core.security import hash_password
from parley.infrastructure.local.database import init_db
from parley.infrastructure.local.user_repository import SqliteUserRepository
from parley.models.user import UserCreate

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
PASSWORD = "123456"

SEED_USERS: list[dict[str, str]] = [
    # Female users
    {"email": "emma.thompson@example.com", "full_name": "Emma Thompson", "profile_pic": "https://randomuser.me/api/portraits/women/1.jpg"},
    {"email": "olivia.miller@example.com", "full_name": "Olivia Miller", "profile_pic": "https://randomuser.me/api/portraits/women/2.jpg"},
    {"email": "sophia.davis@example.com", "full_name": "Sophia Davis", "profile_pic": "https://randomuser.me/api/portraits/women/3.jpg"},
    {"email": "ava.wilson@example.com", "full_name": "Ava Wilson", "profile_pic": "https://randomuser.me/api/portraits/women/4.jpg"},
    # Male users
    {"email": "james.anderson@example.com", "full_name": "James Anderson", "profile_pic": "https://randomuser.me/api/portraits/men/1.jpg"},
    {"email": "william.clark@example.com", "full_name": "William Clark", "profile_pic": "https://randomuser.me/api/portraits/men/2.jpg"},
    {"email": "benjamin.taylor@example.com", "full_name": "Benjamin Taylor", "profile_pic": "https://randomuser.me/api/portraits/men/3.jpg"},
    {"email": "lucas.moore@example.com", "full_name": "Lucas Moore", "profile_pic": "https://randomuser.me/api/portraits/men/4.jpg"},
]


async def seed(dry_run: bool, repo: SqliteUserRepository | None = None) -> list[str]:
    """Create missing seed users; returns the emails that were (or would be) created."""
    if repo is None:
        await init_db()
        repo = SqliteUserRepository()

    created: list[str] = []
    for entry in SEED_USERS:
        if await repo.get_by_email(entry["email"]):
            print(f"  = {entry['email']} (exists)")
            continue
        created.append(entry["email"])
        if dry_run:
            print(f"  + {entry['email']} (dry-run)")
            continue
        await repo.create(
            UserCreate(
                full_name=entry["full_name"],
                email=entry["email"],
                password_hash=hash_password(PASSWORD),
                profile_pic=entry["profile_pic"],
            )
        )
        print(f"  + {entry['email']}")

    if dry_run:
        print("\n→ run again with --apply to insert")
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo chat users")
    parser.add_argument("--apply", action="store_true", help="Write to the database")
    args = parser.parse_args()
    asyncio.run(seed(dry_run=not args.apply))


if __name__ == "__main__":
    main()
