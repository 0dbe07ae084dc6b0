from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from paintops.models import Invoice, InvoiceStatus, Payment, PaymentRecipientType
from paintops.services.totals_service import ZERO, quantize_money, to_decimal

OUTSTANDING_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)


def _money(value) -> Decimal:
    return quantize_money(to_decimal(value))


def financial_summary(db: Session) -> dict:
    invoice_rows = db.execute(
        select(Invoice.status, func.count(Invoice.id), func.coalesce(func.sum(Invoice.total_amount), 0))
        .group_by(Invoice.status)
    ).all()
    counts = {status.value: 0 for status in InvoiceStatus}
    sums = {status: ZERO for status in InvoiceStatus}
    for status, count, total in invoice_rows:
        counts[status.value] = int(count)
        sums[status] = to_decimal(total)

    invoiced = sum((value for status, value in sums.items() if status != InvoiceStatus.CANCELLED), ZERO)
    collected = sums[InvoiceStatus.PAID]
    outstanding = sum((sums[status] for status in OUTSTANDING_STATUSES), ZERO)

    payment_rows = db.execute(
        select(Payment.recipient_type, func.coalesce(func.sum(Payment.amount), 0)).group_by(Payment.recipient_type)
    ).all()
    by_recipient = {recipient.value: ZERO for recipient in PaymentRecipientType}
    for recipient_type, total in payment_rows:
        by_recipient[recipient_type.value] = _money(total)
    payments_total = sum(by_recipient.values(), ZERO)

    return {
        'invoiced_total': _money(invoiced),
        'collected_total': _money(collected),
        'outstanding_total': _money(outstanding),
        'invoice_counts': counts,
        'payments_total': _money(payments_total),
        'payments_by_recipient_type': by_recipient,
        'net': _money(collected - payments_total),
    }
