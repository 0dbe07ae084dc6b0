from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import ProjectStatus
from paintops.schemas import ProjectCreate, ProjectOut, ProjectUpdate, QuoteOut
from paintops.services import project_service

router = APIRouter(prefix='/api/projects', tags=['projects'])


@router.get('', response_model=list[ProjectOut])
def list_projects(
    status: ProjectStatus | None = None,
    client_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return project_service.list_projects(db, status=status, client_id=client_id)


@router.get('/{project_id}', response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return project_service.get_project(db, project_id=project_id)


@router.get('/{project_id}/quote', response_model=QuoteOut)
def get_project_quote(project_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return project_service.latest_quote_for_project(db, project_id=project_id)


@router.post('', response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    project = project_service.create_project(db, user_id=principal.id, fields=payload.model_dump())
    db.commit()
    return project


@router.api_route('/{project_id}', methods=['PUT', 'PATCH'], response_model=ProjectOut)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    project = project_service.update_project(
        db, project_id=project_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return project


@router.delete('/{project_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    project_service.delete_project(db, project_id=project_id, user_id=principal.id)
    db.commit()
