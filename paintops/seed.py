from __future__ import annotations

import argparse
import logging

from paintops.config import DEFAULT_ADMIN_PASSWORD, settings
from paintops.db import SessionLocal, init_db
from paintops.services.user_service import ensure_default_admin

logger = logging.getLogger(__name__)


def seed(*, username: str, password: str, name: str) -> None:
    init_db()
    with SessionLocal() as db:
        user = ensure_default_admin(db, username=username, password=password, name=name)
        db.commit()
    if user is not None and password == DEFAULT_ADMIN_PASSWORD:
        logger.warning('Admin %s was created with the default password; change it before going live', username)


def main() -> None:
    parser = argparse.ArgumentParser(description='Create tables and the first admin account.')
    parser.add_argument('--username', default=settings.seed_admin_username, help='Admin username (default from settings).')
    parser.add_argument('--password', default=settings.seed_admin_password, help='Admin password (default from settings).')
    parser.add_argument('--name', default=settings.seed_admin_name, help='Admin display name.')
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)
    seed(username=args.username, password=args.password, name=args.name)


if __name__ == '__main__':
    main()
