from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import ValidationFailed
from paintops.models import Client, ClientClassification, ClientType, Invoice, Project
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import record_activity

REQUIRED_FIELDS = ('name', 'email', 'phone', 'address', 'type', 'classification')


def list_clients(db: Session, *, client_type: ClientType | None = None) -> list[Client]:
    query = select(Client).order_by(Client.name.asc(), Client.id.asc())
    if client_type is not None:
        query = query.where(Client.type == client_type)
    return list(db.execute(query).scalars().all())


def get_client(db: Session, *, client_id: int) -> Client:
    return get_or_raise(db, Client, client_id, label='Client')


def create_client(
    db: Session,
    *,
    user_id: int | None,
    name: str,
    email: str,
    phone: str,
    address: str,
    type: ClientType = ClientType.CLIENT,
    classification: ClientClassification = ClientClassification.RESIDENTIAL,
    notes: str | None = None,
) -> Client:
    client = add_flush(
        db,
        Client(
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            address=address.strip(),
            type=type,
            classification=classification,
            notes=notes.strip() if notes and notes.strip() else None,
        ),
    )
    record_activity(
        db,
        activity_type='client_created',
        description=f'New client {client.name} added',
        user_id=user_id,
        client_id=client.id,
    )
    return client


def update_client(db: Session, *, client_id: int, user_id: int | None, changes: dict) -> Client:
    client = get_client(db, client_id=client_id)
    apply_changes(client, changes, required=REQUIRED_FIELDS)
    db.flush()
    record_activity(
        db,
        activity_type='client_updated',
        description=f'Client {client.name} updated',
        user_id=user_id,
        client_id=client.id,
    )
    return client


def convert_client(db: Session, *, client_id: int, user_id: int | None, client_type: ClientType) -> Client:
    client = get_client(db, client_id=client_id)
    client.type = client_type
    db.flush()
    record_activity(
        db,
        activity_type='client_converted',
        description=f'{client.name} marked as {client_type.value}',
        user_id=user_id,
        client_id=client.id,
    )
    return client


def delete_client(db: Session, *, client_id: int, user_id: int | None) -> None:
    client = get_client(db, client_id=client_id)
    has_projects = db.execute(select(Project.id).where(Project.client_id == client.id).limit(1)).first()
    has_invoices = db.execute(select(Invoice.id).where(Invoice.client_id == client.id).limit(1)).first()
    if has_projects or has_invoices:
        raise ValidationFailed.for_field('client_id', 'Client still has projects or invoices; remove them first')
    name = client.name
    db.delete(client)
    db.flush()
    record_activity(
        db,
        activity_type='client_deleted',
        description=f'Client {name} deleted',
        user_id=user_id,
        client_id=client_id,
    )
