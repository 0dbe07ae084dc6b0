from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from paintops.config import settings
from paintops.db import get_db
from paintops.models import UserRole
from paintops.security.sessions import load_user_from_token


@dataclass
class Principal:
    id: int
    username: str
    name: str
    role: UserRole
    active: bool


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    user = load_user_from_token(db, request.cookies.get(settings.session_cookie_name))
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Not authenticated')
    if not user.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Account disabled')
    principal = Principal(id=user.id, username=user.username, name=user.name, role=user.role, active=user.active)
    # Persist the sliding expiry.
    db.commit()
    return principal


def require_role(*allowed: UserRole):
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return principal

    return _dep
