from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _enum_column(enum_cls: type[Enum], name: str) -> SQLEnum:
    # Persist the lowercase values the API speaks, not the member names.
    return SQLEnum(enum_cls, name=name, values_callable=lambda members: [member.value for member in members])


class UserRole(str, Enum):
    SUPERADMIN = 'superadmin'
    ADMIN = 'admin'
    USER = 'user'


class ClientType(str, Enum):
    CLIENT = 'client'
    PROSPECT = 'prospect'


class ClientClassification(str, Enum):
    RESIDENTIAL = 'residential'
    COMMERCIAL = 'commercial'
    INDUSTRIAL = 'industrial'


class ProjectStatus(str, Enum):
    PENDING = 'pending'
    QUOTED = 'quoted'
    APPROVED = 'approved'
    PREPARING = 'preparing'
    IN_PROGRESS = 'in_progress'
    REVIEWING = 'reviewing'
    COMPLETED = 'completed'
    ARCHIVED = 'archived'


class ProjectPriority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class QuoteStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class InvoiceStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    PAID = 'paid'
    OVERDUE = 'overdue'
    CANCELLED = 'cancelled'


class PurchaseOrderStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    CONFIRMED = 'confirmed'
    RECEIVED = 'received'
    PAID = 'paid'
    CANCELLED = 'cancelled'


class ServiceOrderStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class PaymentRecipientType(str, Enum):
    STAFF = 'staff'
    SUBCONTRACTOR = 'subcontractor'
    SUPPLIER = 'supplier'


class PaymentMethod(str, Enum):
    CASH = 'cash'
    CHECK = 'check'
    TRANSFER = 'transfer'
    CARD = 'card'
    VENMO = 'venmo'
    PAYPAL = 'paypal'
    ZELLE = 'zelle'
    OTHER = 'other'


class StaffAvailability(str, Enum):
    AVAILABLE = 'available'
    ASSIGNED = 'assigned'
    ON_LEAVE = 'on_leave'


class User(Base):
    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        _enum_column(UserRole, 'user_role'), nullable=False, default=UserRole.USER, server_default='user'
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default='true')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class WebSession(Base):
    __tablename__ = 'web_sessions'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Client(Base):
    __tablename__ = 'clients'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[ClientType] = mapped_column(
        _enum_column(ClientType, 'client_type'), nullable=False, default=ClientType.CLIENT, server_default='client'
    )
    classification: Mapped[ClientClassification] = mapped_column(
        _enum_column(ClientClassification, 'client_classification'),
        nullable=False,
        default=ClientClassification.RESIDENTIAL,
        server_default='residential',
    )
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Project(Base):
    __tablename__ = 'projects'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, ForeignKey('clients.id'), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    project_type: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ProjectStatus] = mapped_column(
        _enum_column(ProjectStatus, 'project_status'),
        nullable=False,
        default=ProjectStatus.PENDING,
        server_default='pending',
    )
    priority: Mapped[ProjectPriority] = mapped_column(
        _enum_column(ProjectPriority, 'project_priority'),
        nullable=False,
        default=ProjectPriority.MEDIUM,
        server_default='medium',
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default='0')
    start_date: Mapped[date | None] = mapped_column(Date)
    due_date: Mapped[date | None] = mapped_column(Date)
    completed_date: Mapped[date | None] = mapped_column(Date)
    total_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    assigned_staff: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Quote(Base):
    __tablename__ = 'quotes'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    status: Mapped[QuoteStatus] = mapped_column(
        _enum_column(QuoteStatus, 'quote_status'), nullable=False, default=QuoteStatus.DRAFT, server_default='draft'
    )
    # Legacy rows carry heterogeneous shapes; read them through materialization_service.
    materials_estimate: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    labor_estimate: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_estimate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0'))
    valid_until: Mapped[date | None] = mapped_column(Date)
    sent_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approved_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ServiceOrder(Base):
    __tablename__ = 'service_orders'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    assigned_staff: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[ServiceOrderStatus] = mapped_column(
        _enum_column(ServiceOrderStatus, 'service_order_status'),
        nullable=False,
        default=ServiceOrderStatus.PENDING,
        server_default='pending',
    )
    before_images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    after_images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    client_signature: Mapped[str | None] = mapped_column(Text)
    signature_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    started_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Invoice(Base):
    __tablename__ = 'invoices'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, ForeignKey('clients.id'), nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('projects.id', ondelete='SET NULL'))
    quote_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('quotes.id', ondelete='SET NULL'))
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        _enum_column(InvoiceStatus, 'invoice_status'), nullable=False, default=InvoiceStatus.DRAFT, server_default='draft'
    )
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0'), server_default='0')
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0'), server_default='0')
    notes: Mapped[str | None] = mapped_column(Text)
    paid_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Staff(Base):
    __tablename__ = 'staff'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    availability: Mapped[StaffAvailability] = mapped_column(
        _enum_column(StaffAvailability, 'staff_availability'),
        nullable=False,
        default=StaffAvailability.AVAILABLE,
        server_default='available',
    )
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Subcontractor(Base):
    __tablename__ = 'subcontractors'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    company: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    specialty: Mapped[str | None] = mapped_column(Text)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Supplier(Base):
    __tablename__ = 'suppliers'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    contact_name: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PurchaseOrder(Base):
    __tablename__ = 'purchase_orders'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    supplier_id: Mapped[int] = mapped_column(Integer, ForeignKey('suppliers.id'), nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('projects.id', ondelete='SET NULL'))
    quote_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('quotes.id', ondelete='SET NULL'))
    order_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[PurchaseOrderStatus] = mapped_column(
        _enum_column(PurchaseOrderStatus, 'purchase_order_status'),
        nullable=False,
        default=PurchaseOrderStatus.DRAFT,
        server_default='draft',
    )
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0'), server_default='0')
    delivery_address: Mapped[str | None] = mapped_column(Text)
    delivery_conditions: Mapped[str | None] = mapped_column(Text)
    payment_terms: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Payment(Base):
    __tablename__ = 'payments'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recipient_type: Mapped[PaymentRecipientType] = mapped_column(
        _enum_column(PaymentRecipientType, 'payment_recipient_type'), nullable=False
    )
    recipient_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        _enum_column(PaymentMethod, 'payment_method'), nullable=False, default=PaymentMethod.OTHER, server_default='other'
    )
    purchase_order_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('purchase_orders.id', ondelete='SET NULL'))
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey('projects.id', ondelete='SET NULL'))
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    reference: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Activity(Base):
    __tablename__ = 'activities'

    # Append-only. No foreign keys so the trail outlives deleted records.
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column(Integer)
    project_id: Mapped[int | None] = mapped_column(Integer)
    client_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
