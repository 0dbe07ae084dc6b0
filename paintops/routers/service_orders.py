from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import ServiceOrderStatus
from paintops.schemas import ServiceOrderCreate, ServiceOrderOut, ServiceOrderUpdate
from paintops.services import service_order_service

router = APIRouter(prefix='/api/service-orders', tags=['service-orders'])


@router.get('', response_model=list[ServiceOrderOut])
def list_service_orders(
    status: ServiceOrderStatus | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return service_order_service.list_service_orders(db, status=status, project_id=project_id)


@router.get('/{service_order_id}', response_model=ServiceOrderOut)
def get_service_order(service_order_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return service_order_service.get_service_order(db, service_order_id=service_order_id)


@router.post('', response_model=ServiceOrderOut, status_code=status.HTTP_201_CREATED)
def create_service_order(
    payload: ServiceOrderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    order = service_order_service.create_service_order(db, user_id=principal.id, fields=payload.model_dump())
    db.commit()
    return order


@router.api_route('/{service_order_id}', methods=['PUT', 'PATCH'], response_model=ServiceOrderOut)
def update_service_order(
    service_order_id: int,
    payload: ServiceOrderUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    order = service_order_service.update_service_order(
        db, service_order_id=service_order_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return order


@router.delete('/{service_order_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_service_order(
    service_order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    service_order_service.delete_service_order(db, service_order_id=service_order_id, user_id=principal.id)
    db.commit()
