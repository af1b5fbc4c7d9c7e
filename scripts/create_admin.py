#!/usr/bin/env python3
"""
Create the first super admin account.

Usage:
    python scripts/create_admin.py --email admin@school.in --name "Principal" --password '...'

Requires: migrations applied (alembic upgrade head), database reachable.
"""

import argparse
import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.core.auth.models import UserRole
from src.core.auth.service import AuthService
from src.core.database.session import async_session, engine
from src.core.exceptions import DuplicateError
from src.core.logging import get_logger, setup_logging

log = get_logger("scripts.create_admin")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a SuperAdmin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True, help="Full name")
    parser.add_argument("--password", required=True)
    parser.add_argument("--phone", default=None)
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    setup_logging()

    if len(args.password) < 8:
        log.error("Password must be at least 8 characters")
        return 1

    async with async_session() as session:
        try:
            user = await AuthService(session).create_user(
                email=args.email,
                password=args.password,
                full_name=args.name,
                role=UserRole.SUPER_ADMIN,
                phone=args.phone,
            )
        except DuplicateError as e:
            log.error(e.message)
            return 1
        await session.commit()
        log.info("Created %s %s (id=%s)", user.role, user.email, user.id)

    await engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
