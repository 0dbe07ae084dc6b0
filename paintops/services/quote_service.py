from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.config import settings
from paintops.models import Quote, QuoteStatus
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import UNKNOWN_LABEL, record_activity
from paintops.services.materialization_service import MaterializedItems, materialize_over_existing
from paintops.services.project_service import find_project, get_project
from paintops.services.status_workflow import QUOTE_WORKFLOW, TransitionOutcome, apply_transition

REQUIRED_FIELDS = ('materials_estimate', 'labor_estimate', 'total_estimate', 'images', 'documents')


def list_quotes(db: Session, *, status: QuoteStatus | None = None, project_id: int | None = None) -> list[Quote]:
    query = select(Quote).order_by(Quote.created_at.desc(), Quote.id.desc())
    if status is not None:
        query = query.where(Quote.status == status)
    if project_id is not None:
        query = query.where(Quote.project_id == project_id)
    return list(db.execute(query).scalars().all())


def get_quote(db: Session, *, quote_id: int) -> Quote:
    return get_or_raise(db, Quote, quote_id, label='Quote')


def create_quote(
    db: Session,
    *,
    user_id: int | None,
    project_id: int,
    status: QuoteStatus | str = QuoteStatus.DRAFT,
    materials_estimate: list | None = None,
    labor_estimate: list | None = None,
    total_estimate: Decimal = Decimal('0'),
    valid_until: date | None = None,
    notes: str | None = None,
) -> Quote:
    project = get_project(db, project_id=project_id)
    requested = QUOTE_WORKFLOW.parse_status(status)
    quote = add_flush(
        db,
        Quote(
            project_id=project.id,
            status=QuoteStatus.DRAFT,
            materials_estimate=list(materials_estimate or []),
            labor_estimate=list(labor_estimate or []),
            total_estimate=total_estimate,
            valid_until=valid_until or date.today() + timedelta(days=settings.quote_valid_days),
            notes=notes,
            # Attachments are inherited from the project at creation time only.
            images=list(project.images or []),
            documents=list(project.documents or []),
        ),
    )
    record_activity(
        db,
        activity_type='quote_created',
        description=f'New quote created for project "{project.title}"',
        user_id=user_id,
        project_id=project.id,
        client_id=project.client_id,
    )
    if requested != QuoteStatus.DRAFT:
        _transition(db, quote=quote, requested_status=requested, user_id=user_id)
    return quote


def _transition(db: Session, *, quote: Quote, requested_status: Any, user_id: int | None) -> TransitionOutcome:
    project = find_project(db, quote.project_id)
    return apply_transition(
        db,
        workflow=QUOTE_WORKFLOW,
        document=quote,
        requested_status=requested_status,
        user_id=user_id,
        project_id=quote.project_id,
        client_id=project.client_id if project else None,
        labels={'project': project.title if project else UNKNOWN_LABEL},
    )


def update_quote(db: Session, *, quote_id: int, user_id: int | None, changes: dict) -> Quote:
    """Apply a partial update. A ``status`` key runs the quote transition; anything else logs quote_updated."""
    quote = get_quote(db, quote_id=quote_id)
    changes = dict(changes)
    requested_status = changes.pop('status', None)
    if requested_status is not None:
        QUOTE_WORKFLOW.parse_status(requested_status)
    apply_changes(quote, changes, required=REQUIRED_FIELDS)
    _transition(db, quote=quote, requested_status=requested_status, user_id=user_id)
    return quote


def set_quote_status(db: Session, *, quote_id: int, user_id: int | None, status: QuoteStatus | str) -> Quote:
    return update_quote(db, quote_id=quote_id, user_id=user_id, changes={'status': status})


def delete_quote(db: Session, *, quote_id: int, user_id: int | None) -> None:
    quote = get_quote(db, quote_id=quote_id)
    project = find_project(db, quote.project_id)
    project_id = quote.project_id
    db.delete(quote)
    db.flush()
    record_activity(
        db,
        activity_type='quote_deleted',
        description=f'Quote for project "{project.title if project else UNKNOWN_LABEL}" deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=project.client_id if project else None,
    )


def materialize_quote_items(
    db: Session,
    *,
    quote_id: int,
    existing_items: list[dict],
    confirm_overwrite: bool,
    discount: Any = None,
    locale: str | None = None,
) -> MaterializedItems:
    quote = get_quote(db, quote_id=quote_id)
    return materialize_over_existing(
        quote,
        existing_items=existing_items,
        confirm_overwrite=confirm_overwrite,
        locale=locale,
        global_discount=discount,
    )
