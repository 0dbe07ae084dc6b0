from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import NotFoundError
from paintops.models import Project, PurchaseOrder, PurchaseOrderStatus, Quote, Supplier
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import UNKNOWN_LABEL, record_activity
from paintops.services.materialization_service import materialize_quote
from paintops.services.numbering_service import next_purchase_order_number
from paintops.services.status_workflow import PURCHASE_ORDER_WORKFLOW, TransitionOutcome, apply_transition
from paintops.services.totals_service import LineItem, compute_totals, normalize_items, quantize_money

REQUIRED_FIELDS = ('supplier_id',)


def list_purchase_orders(
    db: Session,
    *,
    status: PurchaseOrderStatus | None = None,
    supplier_id: int | None = None,
    project_id: int | None = None,
) -> list[PurchaseOrder]:
    query = select(PurchaseOrder).order_by(PurchaseOrder.issue_date.desc(), PurchaseOrder.id.desc())
    if status is not None:
        query = query.where(PurchaseOrder.status == status)
    if supplier_id is not None:
        query = query.where(PurchaseOrder.supplier_id == supplier_id)
    if project_id is not None:
        query = query.where(PurchaseOrder.project_id == project_id)
    return list(db.execute(query).scalars().all())


def get_purchase_order(db: Session, *, purchase_order_id: int) -> PurchaseOrder:
    return get_or_raise(db, PurchaseOrder, purchase_order_id, label='Purchase order')


def _order_line(item: LineItem) -> dict:
    # Order rows have no per-line discount and call the unit price 'price'.
    line = LineItem(description=item.description, quantity=item.quantity, unit_price=item.unit_price, unit=item.unit)
    return {
        'description': line.description,
        'quantity': str(line.quantity),
        'unit': line.unit,
        'price': str(quantize_money(line.unit_price)),
        'total': str(line.total),
    }


def _apply_items(order: PurchaseOrder, items: Iterable[Mapping[str, Any] | LineItem]) -> None:
    lines = [_order_line(item) for item in normalize_items(items)]
    order.items = lines
    order.total_amount = compute_totals(lines).total


def _client_id(db: Session, project_id: int | None) -> int | None:
    if project_id is None:
        return None
    project = db.get(Project, project_id)
    return project.client_id if project else None


def transition_purchase_order(
    db: Session, *, order: PurchaseOrder, requested_status: Any, user_id: int | None
) -> TransitionOutcome:
    supplier = db.get(Supplier, order.supplier_id)
    return apply_transition(
        db,
        workflow=PURCHASE_ORDER_WORKFLOW,
        document=order,
        requested_status=requested_status,
        user_id=user_id,
        project_id=order.project_id,
        client_id=_client_id(db, order.project_id),
        labels={'number': order.order_number, 'supplier': supplier.name if supplier else UNKNOWN_LABEL},
    )


def create_purchase_order(
    db: Session,
    *,
    user_id: int | None,
    supplier_id: int,
    project_id: int | None = None,
    quote_id: int | None = None,
    issue_date: date | None = None,
    expected_delivery_date: date | None = None,
    status: PurchaseOrderStatus | str = PurchaseOrderStatus.DRAFT,
    items: Iterable[Mapping[str, Any] | LineItem] = (),
    delivery_address: str | None = None,
    delivery_conditions: str | None = None,
    payment_terms: str | None = None,
    notes: str | None = None,
) -> PurchaseOrder:
    supplier = get_or_raise(db, Supplier, supplier_id, label='Supplier')
    if project_id is not None:
        get_or_raise(db, Project, project_id, label='Project')
    if quote_id is not None:
        get_or_raise(db, Quote, quote_id, label='Quote')
    requested = PURCHASE_ORDER_WORKFLOW.parse_status(status)
    issue_date = issue_date or date.today()

    order = PurchaseOrder(
        supplier_id=supplier.id,
        project_id=project_id,
        quote_id=quote_id,
        order_number=next_purchase_order_number(db, today=issue_date),
        issue_date=issue_date,
        expected_delivery_date=expected_delivery_date,
        status=PurchaseOrderStatus.DRAFT,
        delivery_address=delivery_address,
        delivery_conditions=delivery_conditions,
        payment_terms=payment_terms,
        notes=notes,
    )
    _apply_items(order, items)
    add_flush(db, order)
    record_activity(
        db,
        activity_type='purchase_order_created',
        description=f'New purchase order {order.order_number} created for {supplier.name}',
        user_id=user_id,
        project_id=project_id,
        client_id=_client_id(db, project_id),
    )
    if requested != PurchaseOrderStatus.DRAFT:
        transition_purchase_order(db, order=order, requested_status=requested, user_id=user_id)
    return order


def create_purchase_order_from_quote(
    db: Session,
    *,
    user_id: int | None,
    quote_id: int,
    supplier_id: int,
    issue_date: date | None = None,
    expected_delivery_date: date | None = None,
    delivery_address: str | None = None,
    delivery_conditions: str | None = None,
    payment_terms: str | None = None,
    locale: str | None = None,
) -> PurchaseOrder:
    quote = get_or_raise(db, Quote, quote_id, label='Quote')
    project = db.get(Project, quote.project_id)
    if project is None:
        raise NotFoundError('Project not found for quote')
    materialized = materialize_quote(quote, locale=locale)
    return create_purchase_order(
        db,
        user_id=user_id,
        supplier_id=supplier_id,
        project_id=project.id,
        quote_id=quote.id,
        issue_date=issue_date,
        expected_delivery_date=expected_delivery_date,
        items=materialized.items,
        delivery_address=delivery_address if delivery_address is not None else project.address,
        delivery_conditions=delivery_conditions,
        payment_terms=payment_terms,
    )


def update_purchase_order(db: Session, *, purchase_order_id: int, user_id: int | None, changes: dict) -> PurchaseOrder:
    order = get_purchase_order(db, purchase_order_id=purchase_order_id)
    changes = dict(changes)
    requested_status = changes.pop('status', None)
    if requested_status is not None:
        PURCHASE_ORDER_WORKFLOW.check_allowed(order.status, PURCHASE_ORDER_WORKFLOW.parse_status(requested_status))
    items = changes.pop('items', None)
    if changes.get('supplier_id') is not None:
        get_or_raise(db, Supplier, changes['supplier_id'], label='Supplier')
    if changes.get('project_id') is not None:
        get_or_raise(db, Project, changes['project_id'], label='Project')
    apply_changes(order, changes, required=REQUIRED_FIELDS)
    if items is not None:
        _apply_items(order, items)
    transition_purchase_order(db, order=order, requested_status=requested_status, user_id=user_id)
    return order


def set_purchase_order_status(
    db: Session, *, purchase_order_id: int, user_id: int | None, status: PurchaseOrderStatus | str
) -> PurchaseOrder:
    return update_purchase_order(db, purchase_order_id=purchase_order_id, user_id=user_id, changes={'status': status})


def delete_purchase_order(db: Session, *, purchase_order_id: int, user_id: int | None) -> None:
    order = get_purchase_order(db, purchase_order_id=purchase_order_id)
    number, project_id = order.order_number, order.project_id
    client_id = _client_id(db, project_id)
    db.delete(order)
    db.flush()
    record_activity(
        db,
        activity_type='purchase_order_deleted',
        description=f'Purchase order {number} deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )
