from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from paintops.models import (
    ClientClassification,
    ClientType,
    InvoiceStatus,
    PaymentMethod,
    PaymentRecipientType,
    ProjectPriority,
    ProjectStatus,
    PurchaseOrderStatus,
    QuoteStatus,
    ServiceOrderStatus,
    StaffAvailability,
    UserRole,
)


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------- LINE ITEMS ----------

class LineItemIn(BaseSchema):
    # Numbers stay loose here: half-filled rows are coerced by the totals engine, not rejected.
    description: str = ''
    quantity: Any = None
    unit_price: Any = None
    discount: Any = None
    unit: Optional[str] = None


class LineItemOut(BaseSchema):
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal = Decimal('0')
    total: Decimal
    unit: Optional[str] = None


class PurchaseOrderItemIn(BaseSchema):
    description: str = ''
    quantity: Any = None
    unit: Optional[str] = None
    price: Any = None


class PurchaseOrderItemOut(BaseSchema):
    description: str
    quantity: Decimal
    unit: Optional[str] = None
    price: Decimal
    total: Decimal


class TotalsPreviewRequest(BaseSchema):
    items: list[dict[str, Any]] = Field(default_factory=list)
    discount: Any = None


class TotalsOut(BaseSchema):
    items: list[LineItemOut]
    subtotal: Decimal
    discount: Decimal
    total: Decimal


class MaterializeRequest(BaseSchema):
    target: Literal['invoice', 'purchase_order'] = 'invoice'
    existing_items: list[dict[str, Any]] = Field(default_factory=list)
    confirm_overwrite: bool = False
    discount: Any = None
    locale: Optional[str] = None


class MaterializeOut(TotalsOut):
    used_fallback: bool


# ---------- AUTH ----------

class LoginRequest(BaseSchema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(BaseSchema):
    id: int
    username: str
    name: str
    role: UserRole


# ---------- CLIENTS ----------

class ClientCreate(BaseSchema):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    type: ClientType = ClientType.CLIENT
    classification: ClientClassification = ClientClassification.RESIDENTIAL
    notes: Optional[str] = None


class ClientUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    type: Optional[ClientType] = None
    classification: Optional[ClientClassification] = None
    notes: Optional[str] = None


class ClientConvert(BaseSchema):
    type: ClientType


class ClientOut(BaseSchema):
    id: int
    name: str
    email: str
    phone: str
    address: str
    type: ClientType
    classification: ClientClassification
    notes: Optional[str]
    created_at: datetime


# ---------- PROJECTS ----------

class ProjectCreate(BaseSchema):
    client_id: int
    title: str = Field(min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    project_type: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PENDING
    priority: ProjectPriority = ProjectPriority.MEDIUM
    progress: int = Field(default=0, ge=0, le=100)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    total_cost: Optional[Decimal] = Field(default=None, ge=0)
    assigned_staff: list[int] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)


class ProjectUpdate(BaseSchema):
    client_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    project_type: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    total_cost: Optional[Decimal] = Field(default=None, ge=0)
    assigned_staff: Optional[list[int]] = None
    images: Optional[list[str]] = None
    documents: Optional[list[str]] = None


class ProjectOut(BaseSchema):
    id: int
    client_id: int
    title: str
    description: Optional[str]
    address: Optional[str]
    project_type: Optional[str]
    status: ProjectStatus
    priority: ProjectPriority
    progress: int
    start_date: Optional[date]
    due_date: Optional[date]
    completed_date: Optional[date]
    total_cost: Optional[Decimal]
    assigned_staff: list
    images: list
    documents: list
    created_at: datetime


# ---------- QUOTES ----------

class QuoteCreate(BaseSchema):
    project_id: int
    status: QuoteStatus = QuoteStatus.DRAFT
    materials_estimate: list[Any] = Field(default_factory=list)
    labor_estimate: list[Any] = Field(default_factory=list)
    total_estimate: Decimal = Field(default=Decimal('0'), ge=0)
    valid_until: Optional[date] = None
    notes: Optional[str] = None


class QuoteUpdate(BaseSchema):
    status: Optional[QuoteStatus] = None
    materials_estimate: Optional[list[Any]] = None
    labor_estimate: Optional[list[Any]] = None
    total_estimate: Optional[Decimal] = Field(default=None, ge=0)
    valid_until: Optional[date] = None
    notes: Optional[str] = None
    images: Optional[list[str]] = None
    documents: Optional[list[str]] = None


class QuoteOut(BaseSchema):
    id: int
    project_id: int
    status: QuoteStatus
    materials_estimate: list
    labor_estimate: list
    total_estimate: Decimal
    valid_until: Optional[date]
    sent_date: Optional[datetime]
    approved_date: Optional[datetime]
    rejected_date: Optional[datetime]
    notes: Optional[str]
    images: list
    documents: list
    created_at: datetime


# ---------- SERVICE ORDERS ----------

class ServiceOrderCreate(BaseSchema):
    project_id: int
    details: str = Field(min_length=1)
    assigned_staff: list[int] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ServiceOrderStatus = ServiceOrderStatus.PENDING
    before_images: list[str] = Field(default_factory=list)
    after_images: list[str] = Field(default_factory=list)
    client_signature: Optional[str] = None
    signature_date: Optional[datetime] = None


class ServiceOrderUpdate(BaseSchema):
    project_id: Optional[int] = None
    details: Optional[str] = Field(default=None, min_length=1)
    assigned_staff: Optional[list[int]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ServiceOrderStatus] = None
    before_images: Optional[list[str]] = None
    after_images: Optional[list[str]] = None
    client_signature: Optional[str] = None
    signature_date: Optional[datetime] = None


class ServiceOrderOut(BaseSchema):
    id: int
    project_id: int
    details: str
    assigned_staff: list
    start_date: Optional[date]
    end_date: Optional[date]
    status: ServiceOrderStatus
    before_images: list
    after_images: list
    client_signature: Optional[str]
    signature_date: Optional[datetime]
    started_date: Optional[datetime]
    completed_date: Optional[datetime]
    created_at: datetime


# ---------- INVOICES ----------

class InvoiceCreate(BaseSchema):
    client_id: int
    project_id: Optional[int] = None
    quote_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: list[LineItemIn] = Field(default_factory=list)
    discount: Any = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseSchema):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    items: Optional[list[LineItemIn]] = None
    discount: Any = None
    notes: Optional[str] = None


class InvoiceFromQuote(BaseSchema):
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    discount: Any = None
    notes: Optional[str] = None
    locale: Optional[str] = None


class InvoiceOut(BaseSchema):
    id: int
    client_id: int
    project_id: Optional[int]
    quote_id: Optional[int]
    invoice_number: str
    issue_date: date
    due_date: date
    status: InvoiceStatus
    items: list[LineItemOut]
    discount: Decimal
    total_amount: Decimal
    notes: Optional[str]
    paid_date: Optional[datetime]
    created_at: datetime


class OverdueSweepOut(BaseSchema):
    marked: int
    invoice_ids: list[int]


# ---------- PURCHASE ORDERS ----------

class PurchaseOrderCreate(BaseSchema):
    supplier_id: int
    project_id: Optional[int] = None
    quote_id: Optional[int] = None
    issue_date: Optional[date] = None
    expected_delivery_date: Optional[date] = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    items: list[PurchaseOrderItemIn] = Field(default_factory=list)
    delivery_address: Optional[str] = None
    delivery_conditions: Optional[str] = None
    payment_terms: Optional[str] = 'Net 30'
    notes: Optional[str] = None


class PurchaseOrderUpdate(BaseSchema):
    supplier_id: Optional[int] = None
    project_id: Optional[int] = None
    expected_delivery_date: Optional[date] = None
    status: Optional[PurchaseOrderStatus] = None
    items: Optional[list[PurchaseOrderItemIn]] = None
    delivery_address: Optional[str] = None
    delivery_conditions: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None


class PurchaseOrderFromQuote(BaseSchema):
    supplier_id: int
    issue_date: Optional[date] = None
    expected_delivery_date: Optional[date] = None
    delivery_address: Optional[str] = None
    delivery_conditions: Optional[str] = None
    payment_terms: Optional[str] = 'Net 30'
    locale: Optional[str] = None


class PurchaseOrderOut(BaseSchema):
    id: int
    supplier_id: int
    project_id: Optional[int]
    quote_id: Optional[int]
    order_number: str
    issue_date: date
    expected_delivery_date: Optional[date]
    status: PurchaseOrderStatus
    items: list[PurchaseOrderItemOut]
    total_amount: Decimal
    delivery_address: Optional[str]
    delivery_conditions: Optional[str]
    payment_terms: Optional[str]
    notes: Optional[str]
    created_at: datetime


# ---------- PAYMENTS ----------

class PaymentCreate(BaseSchema):
    recipient_type: PaymentRecipientType
    recipient_id: int
    amount: Decimal = Field(gt=0)
    method: PaymentMethod = PaymentMethod.OTHER
    purchase_order_id: Optional[int] = None
    project_id: Optional[int] = None
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseSchema):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    method: Optional[PaymentMethod] = None
    project_id: Optional[int] = None
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentOut(BaseSchema):
    id: int
    recipient_type: PaymentRecipientType
    recipient_id: int
    amount: Decimal
    method: PaymentMethod
    purchase_order_id: Optional[int]
    project_id: Optional[int]
    payment_date: date
    reference: Optional[str]
    notes: Optional[str]
    created_at: datetime


# ---------- PERSONNEL ----------

class StaffCreate(BaseSchema):
    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    email: Optional[str] = None
    phone: str = Field(min_length=1)
    availability: StaffAvailability = StaffAvailability.AVAILABLE
    skills: list[str] = Field(default_factory=list)


class StaffUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    availability: Optional[StaffAvailability] = None
    skills: Optional[list[str]] = None


class StaffOut(BaseSchema):
    id: int
    name: str
    role: str
    email: Optional[str]
    phone: str
    availability: StaffAvailability
    skills: list
    created_at: datetime


class SubcontractorCreate(BaseSchema):
    name: str = Field(min_length=1)
    company: Optional[str] = None
    email: Optional[str] = None
    phone: str = Field(min_length=1)
    specialty: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SubcontractorUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    specialty: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SubcontractorOut(BaseSchema):
    id: int
    name: str
    company: Optional[str]
    email: Optional[str]
    phone: str
    specialty: Optional[str]
    hourly_rate: Optional[Decimal]
    notes: Optional[str]
    created_at: datetime


class SupplierCreate(BaseSchema):
    name: str = Field(min_length=1)
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: str = Field(min_length=1)
    address: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None


class SupplierUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None


class SupplierOut(BaseSchema):
    id: int
    name: str
    contact_name: Optional[str]
    email: Optional[str]
    phone: str
    address: Optional[str]
    category: Optional[str]
    notes: Optional[str]
    created_at: datetime


# ---------- ACTIVITY / REPORTS ----------

class ActivityOut(BaseSchema):
    id: int
    type: str
    description: str
    user_id: Optional[int]
    project_id: Optional[int]
    client_id: Optional[int]
    created_at: datetime


class FinancialSummaryOut(BaseSchema):
    invoiced_total: Decimal
    collected_total: Decimal
    outstanding_total: Decimal
    invoice_counts: dict[str, int]
    payments_total: Decimal
    payments_by_recipient_type: dict[str, Decimal]
    net: Decimal
