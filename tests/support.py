from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, sessionmaker

from paintops.db import build_engine, init_db
from paintops.models import Client, Project, ProjectStatus, Quote, QuoteStatus, Staff, Supplier, User, UserRole


def make_session_factory() -> sessionmaker:
    engine = build_engine('sqlite://')
    init_db(bind=engine)
    return sessionmaker(bind=engine, autoflush=False)


def add_user(db: Session, *, username: str = 'admin', password_hash: str = 'x') -> User:
    user = User(username=username, password_hash=password_hash, name='Admin', role=UserRole.SUPERADMIN, active=True)
    db.add(user)
    db.flush()
    return user


def add_client(db: Session, *, name: str = 'Acme Homes') -> Client:
    client = Client(name=name, email='office@acme.test', phone='555-0100', address='1 Main St')
    db.add(client)
    db.flush()
    return client


def add_project(db: Session, client: Client, *, title: str = 'Kitchen repaint', **fields) -> Project:
    project = Project(client_id=client.id, title=title, status=ProjectStatus.PENDING, address='1 Main St', **fields)
    db.add(project)
    db.flush()
    return project


def add_quote(
    db: Session,
    project: Project,
    *,
    materials=None,
    labor=None,
    total_estimate: Decimal = Decimal('0'),
    status: QuoteStatus = QuoteStatus.DRAFT,
) -> Quote:
    quote = Quote(
        project_id=project.id,
        status=status,
        materials_estimate=materials if materials is not None else [],
        labor_estimate=labor if labor is not None else [],
        total_estimate=total_estimate,
        valid_until=date(2030, 1, 1),
        images=[],
        documents=[],
    )
    db.add(quote)
    db.flush()
    return quote


def add_supplier(db: Session, *, name: str = 'Paint Depot') -> Supplier:
    supplier = Supplier(name=name, phone='555-0199')
    db.add(supplier)
    db.flush()
    return supplier


def add_staff(db: Session, *, name: str = 'Rosa') -> Staff:
    staff = Staff(name=name, role='Painter', phone='555-0142')
    db.add(staff)
    db.flush()
    return staff
