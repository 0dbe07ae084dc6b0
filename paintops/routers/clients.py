from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import ClientType
from paintops.schemas import ClientConvert, ClientCreate, ClientOut, ClientUpdate
from paintops.services import client_service

router = APIRouter(prefix='/api/clients', tags=['clients'])


@router.get('', response_model=list[ClientOut])
def list_clients(
    type: ClientType | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return client_service.list_clients(db, client_type=type)


@router.get('/{client_id}', response_model=ClientOut)
def get_client(client_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return client_service.get_client(db, client_id=client_id)


@router.post('', response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    client = client_service.create_client(db, user_id=principal.id, **payload.model_dump())
    db.commit()
    return client


@router.api_route('/{client_id}', methods=['PUT', 'PATCH'], response_model=ClientOut)
def update_client(
    client_id: int,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    client = client_service.update_client(
        db, client_id=client_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return client


@router.post('/{client_id}/convert', response_model=ClientOut)
def convert_client(
    client_id: int,
    payload: ClientConvert,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    client = client_service.convert_client(db, client_id=client_id, user_id=principal.id, client_type=payload.type)
    db.commit()
    return client


@router.delete('/{client_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    client_service.delete_client(db, client_id=client_id, user_id=principal.id)
    db.commit()
