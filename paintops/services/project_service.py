from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.errors import NotFoundError
from paintops.models import Client, Project, ProjectStatus, Quote, ServiceOrder
from paintops.services._crud import add_flush, apply_changes, get_or_raise
from paintops.services.activity_service import record_activity

REQUIRED_FIELDS = ('client_id', 'title', 'status', 'priority', 'progress', 'assigned_staff', 'images', 'documents')


def list_projects(
    db: Session,
    *,
    status: ProjectStatus | None = None,
    client_id: int | None = None,
) -> list[Project]:
    query = select(Project).order_by(Project.created_at.desc(), Project.id.desc())
    if status is not None:
        query = query.where(Project.status == status)
    if client_id is not None:
        query = query.where(Project.client_id == client_id)
    return list(db.execute(query).scalars().all())


def get_project(db: Session, *, project_id: int) -> Project:
    return get_or_raise(db, Project, project_id, label='Project')


def find_project(db: Session, project_id: int | None) -> Project | None:
    if project_id is None:
        return None
    return db.get(Project, project_id)


def latest_quote_for_project(db: Session, *, project_id: int) -> Quote:
    get_project(db, project_id=project_id)
    quote = db.execute(
        select(Quote).where(Quote.project_id == project_id).order_by(Quote.created_at.desc(), Quote.id.desc()).limit(1)
    ).scalar_one_or_none()
    if quote is None:
        raise NotFoundError('Quote not found for project')
    return quote


def create_project(db: Session, *, user_id: int | None, fields: dict) -> Project:
    get_or_raise(db, Client, fields['client_id'], label='Client')
    project = add_flush(db, Project(**fields))
    record_activity(
        db,
        activity_type='project_created',
        description=f'New project "{project.title}" created',
        user_id=user_id,
        project_id=project.id,
        client_id=project.client_id,
    )
    return project


def update_project(db: Session, *, project_id: int, user_id: int | None, changes: dict) -> Project:
    project = get_project(db, project_id=project_id)
    if changes.get('client_id') is not None:
        get_or_raise(db, Client, changes['client_id'], label='Client')
    apply_changes(project, changes, required=REQUIRED_FIELDS)
    db.flush()
    record_activity(
        db,
        activity_type='project_updated',
        description=f'Project "{project.title}" updated',
        user_id=user_id,
        project_id=project.id,
        client_id=project.client_id,
    )
    return project


def delete_project(db: Session, *, project_id: int, user_id: int | None) -> None:
    project = get_project(db, project_id=project_id)
    title, client_id = project.title, project.client_id
    for model in (Quote, ServiceOrder):
        for child in db.execute(select(model).where(model.project_id == project.id)).scalars().all():
            db.delete(child)
    db.delete(project)
    db.flush()
    record_activity(
        db,
        activity_type='project_deleted',
        description=f'Project "{title}" deleted',
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
    )
