from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.models import InvoiceStatus
from paintops.schemas import InvoiceCreate, InvoiceFromQuote, InvoiceOut, InvoiceUpdate, OverdueSweepOut
from paintops.services import invoice_service

router = APIRouter(prefix='/api/invoices', tags=['invoices'])


@router.get('', response_model=list[InvoiceOut])
def list_invoices(
    status: InvoiceStatus | None = None,
    client_id: int | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_current_principal),
):
    return invoice_service.list_invoices(db, status=status, client_id=client_id, project_id=project_id)


@router.get('/{invoice_id}', response_model=InvoiceOut)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
    return invoice_service.get_invoice(db, invoice_id=invoice_id)


@router.post('', response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    invoice = invoice_service.create_invoice(db, user_id=principal.id, **payload.model_dump())
    db.commit()
    return invoice


@router.post('/from-quote/{quote_id}', response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice_from_quote(
    quote_id: int,
    payload: InvoiceFromQuote,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    invoice = invoice_service.create_invoice_from_quote(db, user_id=principal.id, quote_id=quote_id, **payload.model_dump())
    db.commit()
    return invoice


@router.post('/mark-overdue', response_model=OverdueSweepOut)
def mark_overdue(
    as_of: date | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    invoices = invoice_service.mark_overdue_invoices(db, user_id=principal.id, today=as_of)
    db.commit()
    return {'marked': len(invoices), 'invoice_ids': [invoice.id for invoice in invoices]}


@router.api_route('/{invoice_id}', methods=['PUT', 'PATCH'], response_model=InvoiceOut)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    invoice = invoice_service.update_invoice(
        db, invoice_id=invoice_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return invoice


@router.delete('/{invoice_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    invoice_service.delete_invoice(db, invoice_id=invoice_id, user_id=principal.id)
    db.commit()
