from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.config import settings
from paintops.db import get_db
from paintops.schemas import LoginRequest, UserOut
from paintops.security.sessions import create_web_session, revoke_web_session
from paintops.services.user_service import authenticate_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['auth'])


@router.post('/login', response_model=UserOut)
def login(payload: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, username=payload.username, password=payload.password)
    if user is None:
        logger.warning('Failed login for %r', payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid username or password')

    token = create_web_session(db, user.id, request.headers.get('user-agent'))
    db.commit()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_ttl_minutes * 60,
    )
    return user


@router.post('/logout', status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, db: Session = Depends(get_db)):
    revoke_web_session(db, request.cookies.get(settings.session_cookie_name))
    db.commit()
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get('/user', response_model=UserOut)
def current_user(principal: Principal = Depends(get_current_principal)):
    return principal
