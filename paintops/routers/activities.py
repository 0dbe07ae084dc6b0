from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.schemas import ActivityOut
from paintops.services import activity_service

router = APIRouter(prefix='/api/activities', tags=['activities'])


@router.get('', response_model=list[ActivityOut])
def list_activities(
    project_id: int | None = None,
    client_id: int | None = None,
    user_id: int | None = None,
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return activity_service.list_activities(db, project_id=project_id, client_id=client_id, user_id=user_id, limit=limit)


@router.get('/{activity_id}', response_model=ActivityOut)
def get_activity(activity_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return activity_service.get_activity(db, activity_id=activity_id)
