from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.config import settings
from paintops.errors import NotFoundError, ValidationFailed
from paintops.models import Client, Invoice, InvoiceStatus, Project, Quote
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import UNKNOWN_LABEL, record_activity
from paintops.services.materialization_service import materialize_quote
from paintops.services.numbering_service import next_invoice_number
from paintops.services.status_workflow import INVOICE_WORKFLOW, TransitionOutcome, apply_transition
from paintops.services.totals_service import LineItem, compute_totals, items_to_json, normalize_items

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('client_id', 'issue_date', 'due_date')


def list_invoices(
    db: Session,
    *,
    status: InvoiceStatus | None = None,
    client_id: int | None = None,
    project_id: int | None = None,
) -> list[Invoice]:
    query = select(Invoice).order_by(Invoice.issue_date.desc(), Invoice.id.desc())
    if status is not None:
        query = query.where(Invoice.status == status)
    if client_id is not None:
        query = query.where(Invoice.client_id == client_id)
    if project_id is not None:
        query = query.where(Invoice.project_id == project_id)
    return list(db.execute(query).scalars().all())


def get_invoice(db: Session, *, invoice_id: int) -> Invoice:
    return get_or_raise(db, Invoice, invoice_id, label='Invoice')


def _validate_dates(issue_date: date, due_date: date) -> None:
    if due_date < issue_date:
        raise ValidationFailed.for_field('due_date', 'Due date cannot be before the issue date')


def _apply_items(invoice: Invoice, items: Iterable[Mapping[str, Any] | LineItem], discount: Any) -> None:
    normalized = normalize_items(items)
    totals = compute_totals(normalized, discount)
    invoice.items = items_to_json(normalized)
    invoice.discount = totals.global_discount
    invoice.total_amount = totals.total


def _labels(db: Session, invoice: Invoice) -> dict[str, str]:
    client = db.get(Client, invoice.client_id)
    return {'number': invoice.invoice_number, 'client': client.name if client else UNKNOWN_LABEL}


def _transition(db: Session, *, invoice: Invoice, requested_status: Any, user_id: int | None) -> TransitionOutcome:
    return apply_transition(
        db,
        workflow=INVOICE_WORKFLOW,
        document=invoice,
        requested_status=requested_status,
        user_id=user_id,
        project_id=invoice.project_id,
        client_id=invoice.client_id,
        labels=_labels(db, invoice),
    )


def create_invoice(
    db: Session,
    *,
    user_id: int | None,
    client_id: int,
    project_id: int | None = None,
    quote_id: int | None = None,
    issue_date: date | None = None,
    due_date: date | None = None,
    status: InvoiceStatus | str = InvoiceStatus.DRAFT,
    items: Iterable[Mapping[str, Any] | LineItem] = (),
    discount: Any = None,
    notes: str | None = None,
) -> Invoice:
    get_or_raise(db, Client, client_id, label='Client')
    project = get_or_raise(db, Project, project_id, label='Project') if project_id is not None else None
    if quote_id is not None:
        get_or_raise(db, Quote, quote_id, label='Quote')
    requested = INVOICE_WORKFLOW.parse_status(status)
    issue_date = issue_date or date.today()
    due_date = due_date or issue_date + timedelta(days=settings.invoice_due_days)
    _validate_dates(issue_date, due_date)

    invoice = Invoice(
        client_id=client_id,
        project_id=project_id,
        quote_id=quote_id,
        invoice_number=next_invoice_number(db, today=issue_date),
        issue_date=issue_date,
        due_date=due_date,
        status=InvoiceStatus.DRAFT,
        notes=notes,
    )
    _apply_items(invoice, items, discount)
    add_flush(db, invoice)
    record_activity(
        db,
        activity_type='invoice_created',
        description=(
            f'New invoice {invoice.invoice_number} created for project "{project.title if project else UNKNOWN_LABEL}"'
        ),
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )
    if requested != InvoiceStatus.DRAFT:
        _transition(db, invoice=invoice, requested_status=requested, user_id=user_id)
    return invoice


def create_invoice_from_quote(
    db: Session,
    *,
    user_id: int | None,
    quote_id: int,
    issue_date: date | None = None,
    due_date: date | None = None,
    discount: Any = None,
    notes: str | None = None,
    locale: str | None = None,
) -> Invoice:
    quote = get_or_raise(db, Quote, quote_id, label='Quote')
    project = db.get(Project, quote.project_id)
    if project is None:
        raise NotFoundError('Project not found for quote')
    materialized = materialize_quote(quote, locale=locale, global_discount=discount)
    return create_invoice(
        db,
        user_id=user_id,
        client_id=project.client_id,
        project_id=project.id,
        quote_id=quote.id,
        issue_date=issue_date,
        due_date=due_date,
        items=materialized.items,
        discount=discount,
        notes=notes,
    )


def update_invoice(db: Session, *, invoice_id: int, user_id: int | None, changes: dict) -> Invoice:
    invoice = get_invoice(db, invoice_id=invoice_id)
    changes = dict(changes)
    requested_status = changes.pop('status', None)
    if requested_status is not None:
        INVOICE_WORKFLOW.check_allowed(invoice.status, INVOICE_WORKFLOW.parse_status(requested_status))
    items = changes.pop('items', None)
    discount_changed = 'discount' in changes
    discount = changes.pop('discount', None)

    if changes.get('client_id') is not None:
        get_or_raise(db, Client, changes['client_id'], label='Client')
    if changes.get('project_id') is not None:
        get_or_raise(db, Project, changes['project_id'], label='Project')
    apply_changes(invoice, changes, required=REQUIRED_FIELDS)
    _validate_dates(invoice.issue_date, invoice.due_date)

    if items is not None or discount_changed:
        _apply_items(
            invoice,
            items if items is not None else invoice.items,
            discount if discount_changed else invoice.discount,
        )
    _transition(db, invoice=invoice, requested_status=requested_status, user_id=user_id)
    return invoice


def set_invoice_status(db: Session, *, invoice_id: int, user_id: int | None, status: InvoiceStatus | str) -> Invoice:
    return update_invoice(db, invoice_id=invoice_id, user_id=user_id, changes={'status': status})


def delete_invoice(db: Session, *, invoice_id: int, user_id: int | None) -> None:
    invoice = get_invoice(db, invoice_id=invoice_id)
    number, project_id, client_id = invoice.invoice_number, invoice.project_id, invoice.client_id
    db.delete(invoice)
    db.flush()
    record_activity(
        db,
        activity_type='invoice_deleted',
        description=f'Invoice {number} deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )


def mark_overdue_invoices(db: Session, *, user_id: int | None, today: date | None = None) -> list[Invoice]:
    today = today or date.today()
    rows = db.execute(
        select(Invoice)
        .where(Invoice.status == InvoiceStatus.SENT, Invoice.due_date < today)
        .order_by(Invoice.due_date.asc(), Invoice.id.asc())
    ).scalars().all()
    for invoice in rows:
        _transition(db, invoice=invoice, requested_status=InvoiceStatus.OVERDUE, user_id=user_id)
    if rows:
        logger.info('Marked %d invoice(s) overdue as of %s', len(rows), today.isoformat())
    return list(rows)
