from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import PaymentRecipientType
from paintops.schemas import PaymentCreate, PaymentOut, PaymentUpdate
from paintops.services import payment_service

router = APIRouter(prefix='/api/payments', tags=['payments'])


@router.get('', response_model=list[PaymentOut])
def list_payments(
    recipient_type: PaymentRecipientType | None = None,
    project_id: int | None = None,
    purchase_order_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return payment_service.list_payments(
        db, recipient_type=recipient_type, project_id=project_id, purchase_order_id=purchase_order_id
    )


@router.get('/{payment_id}', response_model=PaymentOut)
def get_payment(payment_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return payment_service.get_payment(db, payment_id=payment_id)


@router.post('', response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    payment = payment_service.create_payment(db, user_id=principal.id, **payload.model_dump())
    db.commit()
    return payment


@router.api_route('/{payment_id}', methods=['PUT', 'PATCH'], response_model=PaymentOut)
def update_payment(
    payment_id: int,
    payload: PaymentUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    payment = payment_service.update_payment(
        db, payment_id=payment_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return payment


@router.delete('/{payment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(payment_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    payment_service.delete_payment(db, payment_id=payment_id, user_id=principal.id)
    db.commit()
