from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from paintops.errors import NotFoundError
from paintops.models import Activity

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = 'Unknown'


def record_activity(
    db: Session,
    *,
    activity_type: str,
    description: str,
    user_id: int | None,
    project_id: int | None = None,
    client_id: int | None = None,
) -> Activity | None:
    """Append one audit entry inside a savepoint.

    A failed write is logged and dropped; it never undoes the caller's pending changes.
    """
    # The document write must land before the audit entry.
    db.flush()
    try:
        with db.begin_nested():
            activity = Activity(
                type=activity_type,
                description=description,
                user_id=user_id,
                project_id=project_id,
                client_id=client_id,
            )
            db.add(activity)
    except SQLAlchemyError:
        logger.exception('Failed to record %s activity', activity_type)
        return None
    return activity


def list_activities(
    db: Session,
    *,
    project_id: int | None = None,
    client_id: int | None = None,
    user_id: int | None = None,
    limit: int = 200,
) -> list[Activity]:
    query = select(Activity).order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit)
    # Same precedence as the timeline filters: project, then client, then user.
    if project_id is not None:
        query = query.where(Activity.project_id == project_id)
    elif client_id is not None:
        query = query.where(Activity.client_id == client_id)
    elif user_id is not None:
        query = query.where(Activity.user_id == user_id)
    return list(db.execute(query).scalars().all())


def get_activity(db: Session, *, activity_id: int) -> Activity:
    activity = db.execute(select(Activity).where(Activity.id == activity_id)).scalar_one_or_none()
    if not activity:
        raise NotFoundError('Activity not found')
    return activity
