from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal('0.01')
ZERO = Decimal('0')

_STRIP_CHARS = ('$', ',', ' ')


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce form input to a Decimal, returning ``default`` for anything unparsable.

    Accepts numbers, numeric strings and currency-formatted strings such as ``'$1,200.50'``.
    Booleans, NaN and infinities are treated as unparsable.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return Decimal(str(value))
    if isinstance(value, str):
        raw = value.strip()
        for char in _STRIP_CHARS:
            raw = raw.replace(char, '')
        if not raw:
            return default
        try:
            parsed = Decimal(raw)
        except InvalidOperation:
            return default
        return parsed if parsed.is_finite() else default
    return default


def _non_negative(value: Any) -> Decimal:
    return max(to_decimal(value), ZERO)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal = ZERO
    unit: str | None = None

    @property
    def total(self) -> Decimal:
        return compute_item_total(self)

    def to_json(self) -> dict:
        payload = {
            'description': self.description,
            'quantity': str(self.quantity),
            'unit_price': str(quantize_money(self.unit_price)),
            'discount': str(quantize_money(self.discount)),
            'total': str(self.total),
        }
        if self.unit is not None:
            payload['unit'] = self.unit
        return payload


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    global_discount: Decimal
    total: Decimal


def line_item_from_mapping(raw: Mapping[str, Any] | LineItem) -> LineItem:
    if isinstance(raw, LineItem):
        return raw
    unit = raw.get('unit')
    unit_price = raw.get('unit_price')
    if unit_price in (None, ''):
        # Purchase order rows call it 'price'.
        unit_price = raw.get('price')
    return LineItem(
        description=str(raw.get('description') or '').strip(),
        quantity=_non_negative(raw.get('quantity')),
        unit_price=_non_negative(unit_price),
        discount=_non_negative(raw.get('discount')),
        unit=str(unit) if unit not in (None, '') else None,
    )


def compute_item_total(item: LineItem) -> Decimal:
    return quantize_money(item.quantity * item.unit_price - item.discount)


def compute_totals(items: Iterable[Mapping[str, Any] | LineItem], global_discount: Any = ZERO) -> DocumentTotals:
    normalized = [line_item_from_mapping(item) for item in items]
    subtotal = quantize_money(sum((compute_item_total(item) for item in normalized), ZERO))
    discount = quantize_money(_non_negative(global_discount))
    total = max(ZERO, subtotal - discount)
    return DocumentTotals(subtotal=subtotal, global_discount=discount, total=quantize_money(total))


def normalize_items(items: Iterable[Mapping[str, Any] | LineItem]) -> list[LineItem]:
    return [line_item_from_mapping(item) for item in items]


def items_to_json(items: Iterable[LineItem]) -> list[dict]:
    return [item.to_json() for item in items]
