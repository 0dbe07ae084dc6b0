from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import PurchaseOrderStatus
from paintops.schemas import PurchaseOrderCreate, PurchaseOrderFromQuote, PurchaseOrderOut, PurchaseOrderUpdate
from paintops.services import purchase_order_service

router = APIRouter(prefix='/api/purchase-orders', tags=['purchase-orders'])


@router.get('', response_model=list[PurchaseOrderOut])
def list_purchase_orders(
    status: PurchaseOrderStatus | None = None,
    supplier_id: int | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return purchase_order_service.list_purchase_orders(db, status=status, supplier_id=supplier_id, project_id=project_id)


@router.get('/{purchase_order_id}', response_model=PurchaseOrderOut)
def get_purchase_order(
    purchase_order_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)
):
    return purchase_order_service.get_purchase_order(db, purchase_order_id=purchase_order_id)


@router.post('', response_model=PurchaseOrderOut, status_code=status.HTTP_201_CREATED)
def create_purchase_order(
    payload: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    order = purchase_order_service.create_purchase_order(db, user_id=principal.id, **payload.model_dump())
    db.commit()
    return order


@router.post('/from-quote/{quote_id}', response_model=PurchaseOrderOut, status_code=status.HTTP_201_CREATED)
def create_purchase_order_from_quote(
    quote_id: int,
    payload: PurchaseOrderFromQuote,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    order = purchase_order_service.create_purchase_order_from_quote(
        db, user_id=principal.id, quote_id=quote_id, **payload.model_dump()
    )
    db.commit()
    return order


@router.api_route('/{purchase_order_id}', methods=['PUT', 'PATCH'], response_model=PurchaseOrderOut)
def update_purchase_order(
    purchase_order_id: int,
    payload: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    order = purchase_order_service.update_purchase_order(
        db,
        purchase_order_id=purchase_order_id,
        user_id=principal.id,
        changes=payload.model_dump(exclude_unset=True),
    )
    db.commit()
    return order


@router.delete('/{purchase_order_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase_order(
    purchase_order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    purchase_order_service.delete_purchase_order(db, purchase_order_id=purchase_order_id, user_id=principal.id)
    db.commit()
