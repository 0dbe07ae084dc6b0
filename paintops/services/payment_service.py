from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import ValidationFailed
from paintops.models import (
    Payment,
    PaymentMethod,
    PaymentRecipientType,
    Project,
    PurchaseOrder,
    PurchaseOrderStatus,
    Staff,
    Subcontractor,
    Supplier,
)
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import record_activity
from paintops.services.purchase_order_service import transition_purchase_order

logger = logging.getLogger(__name__)

RECIPIENT_MODELS = {
    PaymentRecipientType.STAFF: (Staff, 'Staff member'),
    PaymentRecipientType.SUBCONTRACTOR: (Subcontractor, 'Subcontractor'),
    PaymentRecipientType.SUPPLIER: (Supplier, 'Supplier'),
}

REQUIRED_FIELDS = ('amount', 'method', 'payment_date')


def list_payments(
    db: Session,
    *,
    recipient_type: PaymentRecipientType | None = None,
    project_id: int | None = None,
    purchase_order_id: int | None = None,
) -> list[Payment]:
    query = select(Payment).order_by(Payment.payment_date.desc(), Payment.id.desc())
    if recipient_type is not None:
        query = query.where(Payment.recipient_type == recipient_type)
    if project_id is not None:
        query = query.where(Payment.project_id == project_id)
    if purchase_order_id is not None:
        query = query.where(Payment.purchase_order_id == purchase_order_id)
    return list(db.execute(query).scalars().all())


def get_payment(db: Session, *, payment_id: int) -> Payment:
    return get_or_raise(db, Payment, payment_id, label='Payment')


def _recipient_name(db: Session, recipient_type: PaymentRecipientType, recipient_id: int) -> str:
    model, label = RECIPIENT_MODELS[recipient_type]
    return get_or_raise(db, model, recipient_id, label=label).name


def _client_id(db: Session, project_id: int | None) -> int | None:
    if project_id is None:
        return None
    project = db.get(Project, project_id)
    return project.client_id if project else None


def create_payment(
    db: Session,
    *,
    user_id: int | None,
    recipient_type: PaymentRecipientType,
    recipient_id: int,
    amount: Decimal,
    method: PaymentMethod = PaymentMethod.OTHER,
    purchase_order_id: int | None = None,
    project_id: int | None = None,
    payment_date: date | None = None,
    reference: str | None = None,
    notes: str | None = None,
) -> Payment:
    """
    Record a payment. A linked purchase order is marked paid in the same transaction,
    producing one purchase_order_paid activity; an order that is already paid is left as is.
    """
    if amount is None or amount <= 0:
        raise ValidationFailed.for_field('amount', 'Amount must be greater than zero')
    recipient_name = _recipient_name(db, recipient_type, recipient_id)

    order = None
    if purchase_order_id is not None:
        order = get_or_raise(db, PurchaseOrder, purchase_order_id, label='Purchase order')
        if order.status == PurchaseOrderStatus.CANCELLED:
            raise ValidationFailed.for_field('purchase_order_id', 'Cannot record a payment against a cancelled purchase order')
        if project_id is None:
            project_id = order.project_id
    if project_id is not None:
        get_or_raise(db, Project, project_id, label='Project')

    payment = add_flush(
        db,
        Payment(
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            amount=amount,
            method=method,
            purchase_order_id=purchase_order_id,
            project_id=project_id,
            payment_date=payment_date or date.today(),
            reference=reference,
            notes=notes,
        ),
    )
    record_activity(
        db,
        activity_type='payment_created',
        description=f'Payment of {amount} recorded for {recipient_name}',
        user_id=user_id,
        project_id=project_id,
        client_id=_client_id(db, project_id),
    )

    if order is not None and order.status != PurchaseOrderStatus.PAID:
        transition_purchase_order(db, order=order, requested_status=PurchaseOrderStatus.PAID, user_id=user_id)
        logger.info('Payment %s settled purchase order %s', payment.id, order.order_number)
    return payment


def update_payment(db: Session, *, payment_id: int, user_id: int | None, changes: dict) -> Payment:
    payment = get_payment(db, payment_id=payment_id)
    if changes.get('project_id') is not None:
        get_or_raise(db, Project, changes['project_id'], label='Project')
    apply_changes(payment, changes, required=REQUIRED_FIELDS)
    db.flush()
    record_activity(
        db,
        activity_type='payment_updated',
        description=f'Payment of {payment.amount} updated',
        user_id=user_id,
        project_id=payment.project_id,
        client_id=_client_id(db, payment.project_id),
    )
    return payment


def delete_payment(db: Session, *, payment_id: int, user_id: int | None) -> None:
    payment = get_payment(db, payment_id=payment_id)
    amount, project_id = payment.amount, payment.project_id
    client_id = _client_id(db, project_id)
    db.delete(payment)
    db.flush()
    record_activity(
        db,
        activity_type='payment_deleted',
        description=f'Payment of {amount} deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )
