from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from paintops.errors import ValidationFailed
from paintops.models import (
    Activity,
    InvoiceStatus,
    Project,
    ProjectStatus,
    PurchaseOrderStatus,
    QuoteStatus,
    ServiceOrderStatus,
)
from paintops.services.activity_service import UNKNOWN_LABEL, record_activity

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class Transition:
    activity_type: str
    message: str
    project_status: ProjectStatus | None = None
    stamp_field: str | None = None


@dataclass(frozen=True)
class DocumentWorkflow:
    kind: str
    status_enum: type[Enum]
    transitions: Mapping[Enum, Transition]
    field_update: Transition
    terminal: frozenset = field(default_factory=frozenset)

    def parse_status(self, value: Any) -> Enum:
        if isinstance(value, self.status_enum):
            return value
        raw = str(value or '').strip().lower()
        try:
            return self.status_enum(raw)
        except ValueError as exc:
            allowed = ', '.join(member.value for member in self.status_enum)
            raise ValidationFailed.for_field('status', f'Invalid {self.kind} status {raw!r}; expected one of: {allowed}') from exc

    def transition_for(self, status: Enum | None) -> Transition:
        if status is None:
            return self.field_update
        return self.transitions.get(status, self.field_update)

    def check_allowed(self, current: Enum, requested: Enum) -> None:
        if requested != current and current in self.terminal:
            raise ValidationFailed.for_field(
                'status',
                f'{self.kind.capitalize()} is {current.value} and can no longer change status',
            )


# Status values are overwrites checked against the enumerated set; only terminal states refuse to move.
QUOTE_WORKFLOW = DocumentWorkflow(
    kind='quote',
    status_enum=QuoteStatus,
    transitions={
        QuoteStatus.SENT: Transition(
            activity_type='quote_sent',
            message='Quote for project "{project}" has been sent to client',
            project_status=ProjectStatus.QUOTED,
            stamp_field='sent_date',
        ),
        QuoteStatus.APPROVED: Transition(
            activity_type='quote_approved',
            message='Quote for project "{project}" has been approved',
            project_status=ProjectStatus.APPROVED,
            stamp_field='approved_date',
        ),
        QuoteStatus.REJECTED: Transition(
            activity_type='quote_rejected',
            message='Quote for project "{project}" has been rejected',
            stamp_field='rejected_date',
        ),
    },
    field_update=Transition(activity_type='quote_updated', message='Quote updated for project "{project}"'),
)

INVOICE_WORKFLOW = DocumentWorkflow(
    kind='invoice',
    status_enum=InvoiceStatus,
    transitions={
        InvoiceStatus.SENT: Transition(
            activity_type='invoice_sent',
            message='Invoice {number} sent to {client}',
        ),
        InvoiceStatus.PAID: Transition(
            activity_type='invoice_paid',
            message='Invoice {number} for {client} has been paid',
            stamp_field='paid_date',
        ),
        InvoiceStatus.OVERDUE: Transition(
            activity_type='invoice_overdue',
            message='Invoice {number} for {client} is overdue',
        ),
        InvoiceStatus.CANCELLED: Transition(
            activity_type='invoice_cancelled',
            message='Invoice {number} for {client} has been cancelled',
        ),
    },
    field_update=Transition(activity_type='invoice_updated', message='Invoice {number} updated'),
    terminal=frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
)

PURCHASE_ORDER_WORKFLOW = DocumentWorkflow(
    kind='purchase order',
    status_enum=PurchaseOrderStatus,
    transitions={
        PurchaseOrderStatus.SENT: Transition(
            activity_type='purchase_order_sent',
            message='Purchase order {number} sent to {supplier}',
        ),
        PurchaseOrderStatus.CONFIRMED: Transition(
            activity_type='purchase_order_confirmed',
            message='Purchase order {number} confirmed by {supplier}',
        ),
        PurchaseOrderStatus.RECEIVED: Transition(
            activity_type='purchase_order_received',
            message='Purchase order {number} from {supplier} received',
        ),
        PurchaseOrderStatus.PAID: Transition(
            activity_type='purchase_order_paid',
            message='Purchase order {number} to {supplier} has been paid',
        ),
        PurchaseOrderStatus.CANCELLED: Transition(
            activity_type='purchase_order_cancelled',
            message='Purchase order {number} to {supplier} has been cancelled',
        ),
    },
    field_update=Transition(activity_type='purchase_order_updated', message='Purchase order {number} updated'),
    terminal=frozenset({PurchaseOrderStatus.PAID, PurchaseOrderStatus.CANCELLED}),
)


SERVICE_ORDER_WORKFLOW = DocumentWorkflow(
    kind='service order',
    status_enum=ServiceOrderStatus,
    transitions={
        ServiceOrderStatus.IN_PROGRESS: Transition(
            activity_type='service_order_started',
            message='Work started on service order for project "{project}"',
            stamp_field='started_date',
        ),
        ServiceOrderStatus.COMPLETED: Transition(
            activity_type='service_order_completed',
            message='Service order for project "{project}" has been completed',
            stamp_field='completed_date',
        ),
    },
    field_update=Transition(activity_type='service_order_updated', message='Service order updated for project "{project}"'),
)


class _LabelContext(dict):
    def __missing__(self, key: str) -> str:
        return UNKNOWN_LABEL


@dataclass(frozen=True)
class TransitionOutcome:
    previous_status: Enum
    status: Enum
    transition: Transition
    activity: Activity | None
    project_updated: bool


def apply_transition(
    db: Session,
    *,
    workflow: DocumentWorkflow,
    document: Any,
    requested_status: Any,
    user_id: int | None,
    project_id: int | None,
    client_id: int | None,
    labels: Mapping[str, str | None],
) -> TransitionOutcome:
    """
    Persist a status overwrite (or a plain field update when ``requested_status`` is None),
    apply the linked project status for that transition, then append one activity.
    A missing project never blocks the change: the description falls back to 'Unknown'.
    """
    previous = document.status
    status = workflow.parse_status(requested_status) if requested_status is not None else None
    if status is not None:
        workflow.check_allowed(previous, status)
        document.status = status
    transition = workflow.transition_for(status)
    if status is not None and transition.stamp_field:
        setattr(document, transition.stamp_field, _now())

    project_updated = False
    if transition.project_status is not None and project_id is not None:
        project = db.get(Project, project_id)
        if project is not None:
            project.status = transition.project_status
            project_updated = True
        else:
            logger.warning('Project %s not found while applying %s', project_id, transition.activity_type)
    db.flush()

    context = _LabelContext({key: value for key, value in labels.items() if value})
    activity = record_activity(
        db,
        activity_type=transition.activity_type,
        description=transition.message.format_map(context),
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )
    if status is not None:
        logger.info(
            '%s %s status %s -> %s',
            workflow.kind,
            getattr(document, 'id', None),
            getattr(previous, 'value', previous),
            status.value,
        )
    return TransitionOutcome(
        previous_status=previous,
        status=document.status,
        transition=transition,
        activity=activity,
        project_updated=project_updated,
    )
