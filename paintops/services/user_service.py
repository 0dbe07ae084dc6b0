from __future__ import annotations

import logging

from pwdlib import PasswordHash
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from paintops.models import User, UserRole

logger = logging.getLogger(__name__)

password_hash = PasswordHash.recommended()


def hash_password(raw_password: str) -> str:
    return password_hash.hash(raw_password)


def verify_password(raw_password: str, hashed_password: str) -> bool:
    return password_hash.verify(raw_password, hashed_password)


def authenticate_user(db: Session, *, username: str, password: str) -> User | None:
    user = db.execute(select(User).where(User.username == username.strip())).scalar_one_or_none()
    if user is None or not user.active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def ensure_default_admin(db: Session, *, username: str, password: str, name: str) -> User | None:
    """Create the superadmin account on an empty users table. Returns None when users already exist."""
    existing = db.execute(select(func.count(User.id))).scalar_one()
    if existing:
        logger.info('Users table already populated (%d); skipping admin seed', existing)
        return None
    user = User(
        username=username,
        password_hash=hash_password(password),
        name=name,
        role=UserRole.SUPERADMIN,
        active=True,
    )
    db.add(user)
    db.flush()
    logger.info('Created default admin user %s', username)
    return user
