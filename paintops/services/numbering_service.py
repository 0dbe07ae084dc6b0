from __future__ import annotations

import secrets
import string
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from paintops.config import settings
from paintops.models import Invoice, PurchaseOrder

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 6
MAX_ATTEMPTS = 20


def _candidate(prefix: str, today: date) -> str:
    suffix = ''.join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f'{prefix}-{today.strftime("%Y%m%d")}-{suffix}'


def _generate(db: Session, *, prefix: str, column, today: date | None) -> str:
    today = today or date.today()
    for _ in range(MAX_ATTEMPTS):
        candidate = _candidate(prefix, today)
        taken = db.execute(select(column).where(column == candidate)).first()
        if not taken:
            return candidate
    raise RuntimeError(f'Could not allocate a unique {prefix} number')


def next_invoice_number(db: Session, *, today: date | None = None) -> str:
    return _generate(db, prefix=settings.invoice_number_prefix, column=Invoice.invoice_number, today=today)


def next_purchase_order_number(db: Session, *, today: date | None = None) -> str:
    return _generate(db, prefix=settings.purchase_order_number_prefix, column=PurchaseOrder.order_number, today=today)
