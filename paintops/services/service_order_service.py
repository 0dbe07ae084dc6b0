from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import ValidationFailed
from paintops.models import ServiceOrder, ServiceOrderStatus
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import UNKNOWN_LABEL, record_activity
from paintops.services.project_service import find_project, get_project
from paintops.services.status_workflow import SERVICE_ORDER_WORKFLOW, TransitionOutcome, apply_transition

REQUIRED_FIELDS = ('project_id', 'details', 'assigned_staff', 'before_images', 'after_images')


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def list_service_orders(
    db: Session,
    *,
    status: ServiceOrderStatus | None = None,
    project_id: int | None = None,
) -> list[ServiceOrder]:
    query = select(ServiceOrder).order_by(ServiceOrder.created_at.desc(), ServiceOrder.id.desc())
    if status is not None:
        query = query.where(ServiceOrder.status == status)
    if project_id is not None:
        query = query.where(ServiceOrder.project_id == project_id)
    return list(db.execute(query).scalars().all())


def get_service_order(db: Session, *, service_order_id: int) -> ServiceOrder:
    return get_or_raise(db, ServiceOrder, service_order_id, label='Service order')


def _check_schedule(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationFailed.for_field('end_date', 'End date cannot be before the start date')


def _stamp_signature(order: ServiceOrder) -> None:
    if order.client_signature and order.signature_date is None:
        order.signature_date = _now()


def _transition(db: Session, *, order: ServiceOrder, requested_status: Any, user_id: int | None) -> TransitionOutcome:
    project = find_project(db, order.project_id)
    return apply_transition(
        db,
        workflow=SERVICE_ORDER_WORKFLOW,
        document=order,
        requested_status=requested_status,
        user_id=user_id,
        project_id=order.project_id,
        client_id=project.client_id if project else None,
        labels={'project': project.title if project else UNKNOWN_LABEL},
    )


def create_service_order(db: Session, *, user_id: int | None, fields: dict) -> ServiceOrder:
    fields = dict(fields)
    project = get_project(db, project_id=fields['project_id'])
    requested = SERVICE_ORDER_WORKFLOW.parse_status(fields.pop('status', None) or ServiceOrderStatus.PENDING)
    _check_schedule(fields.get('start_date'), fields.get('end_date'))
    order = ServiceOrder(**fields, status=ServiceOrderStatus.PENDING)
    _stamp_signature(order)
    add_flush(db, order)
    record_activity(
        db,
        activity_type='service_order_created',
        description=f'New service order created for project "{project.title}"',
        user_id=user_id,
        project_id=project.id,
        client_id=project.client_id,
    )
    if requested != ServiceOrderStatus.PENDING:
        _transition(db, order=order, requested_status=requested, user_id=user_id)
    return order


def update_service_order(db: Session, *, service_order_id: int, user_id: int | None, changes: dict) -> ServiceOrder:
    """Partial update; a ``status`` key runs the service order transition, anything else logs service_order_updated."""
    order = get_service_order(db, service_order_id=service_order_id)
    changes = dict(changes)
    requested_status = changes.pop('status', None)
    if requested_status is not None:
        SERVICE_ORDER_WORKFLOW.parse_status(requested_status)
    if changes.get('project_id') is not None:
        get_project(db, project_id=changes['project_id'])
    _check_schedule(changes.get('start_date', order.start_date), changes.get('end_date', order.end_date))
    apply_changes(order, changes, required=REQUIRED_FIELDS)
    _stamp_signature(order)
    _transition(db, order=order, requested_status=requested_status, user_id=user_id)
    return order


def set_service_order_status(
    db: Session, *, service_order_id: int, user_id: int | None, status: ServiceOrderStatus | str
) -> ServiceOrder:
    return update_service_order(db, service_order_id=service_order_id, user_id=user_id, changes={'status': status})


def delete_service_order(db: Session, *, service_order_id: int, user_id: int | None) -> None:
    order = get_service_order(db, service_order_id=service_order_id)
    project = find_project(db, order.project_id)
    project_id = order.project_id
    db.delete(order)
    db.flush()
    record_activity(
        db,
        activity_type='service_order_deleted',
        description=f'Service order for project "{project.title if project else UNKNOWN_LABEL}" deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=project.client_id if project else None,
    )
