from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import ValidationFailed
from paintops.models import Payment, PaymentRecipientType, PurchaseOrder, Staff, Subcontractor, Supplier
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import record_activity


@dataclass(frozen=True)
class PersonnelKind:
    model: type
    label: str
    activity_prefix: str
    noun: str
    recipient_type: PaymentRecipientType
    required: tuple[str, ...] = ('name', 'phone')


STAFF = PersonnelKind(Staff, 'Staff member', 'staff', 'staff member', PaymentRecipientType.STAFF, ('name', 'role', 'phone'))
SUBCONTRACTOR = PersonnelKind(
    Subcontractor, 'Subcontractor', 'subcontractor', 'subcontractor', PaymentRecipientType.SUBCONTRACTOR
)
SUPPLIER = PersonnelKind(Supplier, 'Supplier', 'supplier', 'supplier', PaymentRecipientType.SUPPLIER)


def list_people(db: Session, kind: PersonnelKind) -> list:
    return list(db.execute(select(kind.model).order_by(kind.model.name.asc(), kind.model.id.asc())).scalars().all())


def get_person(db: Session, kind: PersonnelKind, *, record_id: int):
    return get_or_raise(db, kind.model, record_id, label=kind.label)


def create_person(db: Session, kind: PersonnelKind, *, user_id: int | None, fields: dict):
    record = add_flush(db, kind.model(**fields))
    record_activity(
        db,
        activity_type=f'{kind.activity_prefix}_created',
        description=f'New {kind.noun} {record.name} added',
        user_id=user_id,
    )
    return record


def update_person(db: Session, kind: PersonnelKind, *, record_id: int, user_id: int | None, changes: dict):
    record = get_person(db, kind, record_id=record_id)
    apply_changes(record, changes, required=kind.required)
    db.flush()
    record_activity(
        db,
        activity_type=f'{kind.activity_prefix}_updated',
        description=f'{kind.label} {record.name} updated',
        user_id=user_id,
    )
    return record


def delete_person(db: Session, kind: PersonnelKind, *, record_id: int, user_id: int | None) -> None:
    record = get_person(db, kind, record_id=record_id)
    if kind is SUPPLIER:
        has_orders = db.execute(select(PurchaseOrder.id).where(PurchaseOrder.supplier_id == record.id).limit(1)).first()
        if has_orders:
            raise ValidationFailed.for_field('supplier_id', 'Supplier still has purchase orders; remove them first')
    paid = db.execute(
        select(Payment.id)
        .where(Payment.recipient_type == kind.recipient_type, Payment.recipient_id == record.id)
        .limit(1)
    ).first()
    if paid:
        raise ValidationFailed.for_field('recipient_id', f'{kind.label} has recorded payments and cannot be deleted')
    name = record.name
    db.delete(record)
    db.flush()
    record_activity(
        db,
        activity_type=f'{kind.activity_prefix}_deleted',
        description=f'{kind.label} {name} deleted',
        user_id=user_id,
    )
