from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import QuoteStatus
from paintops.schemas import MaterializeOut, MaterializeRequest, QuoteCreate, QuoteOut, QuoteUpdate
from paintops.services import quote_service
from paintops.services.totals_service import items_to_json

router = APIRouter(prefix='/api/quotes', tags=['quotes'])


@router.get('', response_model=list[QuoteOut])
def list_quotes(
    status: QuoteStatus | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return quote_service.list_quotes(db, status=status, project_id=project_id)


@router.get('/{quote_id}', response_model=QuoteOut)
def get_quote(quote_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return quote_service.get_quote(db, quote_id=quote_id)


@router.post('', response_model=QuoteOut, status_code=status.HTTP_201_CREATED)
def create_quote(
    payload: QuoteCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    quote = quote_service.create_quote(db, user_id=principal.id, **payload.model_dump())
    db.commit()
    return quote


@router.api_route('/{quote_id}', methods=['PUT', 'PATCH'], response_model=QuoteOut)
def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    quote = quote_service.update_quote(
        db, quote_id=quote_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return quote


@router.delete('/{quote_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(quote_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    quote_service.delete_quote(db, quote_id=quote_id, user_id=principal.id)
    db.commit()


@router.post('/{quote_id}/materialize', response_model=MaterializeOut)
def materialize_quote(
    quote_id: int,
    payload: MaterializeRequest,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    # Orders carry no document-level discount.
    discount = payload.discount if payload.target == 'invoice' else None
    materialized = quote_service.materialize_quote_items(
        db,
        quote_id=quote_id,
        existing_items=payload.existing_items,
        confirm_overwrite=payload.confirm_overwrite,
        discount=discount,
        locale=payload.locale,
    )
    return {
        'items': items_to_json(materialized.items),
        'subtotal': materialized.totals.subtotal,
        'discount': materialized.totals.global_discount,
        'total': materialized.totals.total,
        'used_fallback': materialized.used_fallback,
    }
