from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from paintops.config import settings
from paintops.errors import ConfirmationRequired
from paintops.services.totals_service import (
    ZERO,
    DocumentTotals,
    LineItem,
    compute_totals,
    normalize_items,
    to_decimal,
)

LABELS: dict[str, dict[str, str]] = {
    'en': {'material': 'Material {n}', 'labor': 'Labor {n}', 'service': 'Painting service'},
    'es': {'material': 'Material {n}', 'labor': 'Mano de obra {n}', 'service': 'Servicio de pintura'},
}

# Key fallback order for every breakdown shape seen in stored quotes.
MATERIAL_NAME_KEYS = ('item', 'name', 'description', 'material')
MATERIAL_QUANTITY_KEYS = ('quantity', 'qty')
MATERIAL_PRICE_KEYS = ('unitPrice', 'unit_price', 'price', 'cost')
LABOR_NAME_KEYS = ('task', 'description', 'name')
LABOR_QUANTITY_KEYS = ('hours', 'quantity')
LABOR_PRICE_KEYS = ('hourlyRate', 'hourly_rate', 'rate')

DEFAULT_MATERIAL_UNIT = 'unit'
DEFAULT_LABOR_UNIT = 'hours'


@dataclass(frozen=True)
class MaterializedItems:
    items: list[LineItem]
    totals: DocumentTotals
    used_fallback: bool


def labels_for(locale: str | None) -> dict[str, str]:
    key = (locale or settings.document_locale or 'en').strip().lower()[:2]
    return LABELS.get(key, LABELS['en'])


def coerce_breakdown(raw: Any) -> list:
    """Return a quote breakdown as a list; legacy rows may hold a JSON string or nothing."""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return []


def _first_text(row: Mapping[str, Any], keys: Sequence[str]) -> str | None:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _first_amount(row: Mapping[str, Any], keys: Sequence[str], *, keep_zero: bool = True) -> Decimal | None:
    for key in keys:
        parsed = to_decimal(row.get(key), default=None)
        if parsed is None or parsed < 0:
            continue
        if parsed == 0 and not keep_zero:
            continue
        return parsed
    return None


def _normalize_row(
    row: Any,
    *,
    position: int,
    label: str,
    name_keys: Sequence[str],
    quantity_keys: Sequence[str],
    price_keys: Sequence[str],
    default_unit: str,
) -> LineItem:
    synthesized = label.format(n=position)
    if isinstance(row, str) and row.strip():
        return LineItem(description=row.strip(), quantity=Decimal('1'), unit_price=ZERO, unit=default_unit)
    if not isinstance(row, Mapping):
        return LineItem(description=synthesized, quantity=Decimal('1'), unit_price=ZERO, unit=default_unit)

    quantity = _first_amount(row, quantity_keys)
    # A zero price defers to the next key; older rows kept the real figure under 'cost' or 'rate'.
    unit_price = _first_amount(row, price_keys, keep_zero=False)
    unit = _first_text(row, ('unit',))
    return LineItem(
        description=_first_text(row, name_keys) or synthesized,
        quantity=quantity if quantity is not None else Decimal('1'),
        unit_price=unit_price if unit_price is not None else ZERO,
        unit=unit or default_unit,
    )


def normalize_material_rows(raw: Any, *, locale: str | None = None) -> list[LineItem]:
    label = labels_for(locale)['material']
    return [
        _normalize_row(
            row,
            position=index,
            label=label,
            name_keys=MATERIAL_NAME_KEYS,
            quantity_keys=MATERIAL_QUANTITY_KEYS,
            price_keys=MATERIAL_PRICE_KEYS,
            default_unit=DEFAULT_MATERIAL_UNIT,
        )
        for index, row in enumerate(coerce_breakdown(raw), start=1)
    ]


def normalize_labor_rows(raw: Any, *, locale: str | None = None) -> list[LineItem]:
    label = labels_for(locale)['labor']
    return [
        _normalize_row(
            row,
            position=index,
            label=label,
            name_keys=LABOR_NAME_KEYS,
            quantity_keys=LABOR_QUANTITY_KEYS,
            price_keys=LABOR_PRICE_KEYS,
            default_unit=DEFAULT_LABOR_UNIT,
        )
        for index, row in enumerate(coerce_breakdown(raw), start=1)
    ]


def materialize_quote(quote: Any, *, locale: str | None = None, global_discount: Any = ZERO) -> MaterializedItems:
    """
    Turn a quote's materials/labor breakdown into billable line items.
    An empty breakdown yields one service line priced at the quote's stored estimate so a
    derived document is never empty. Totals are always recomputed from the produced items.
    """
    items = normalize_material_rows(getattr(quote, 'materials_estimate', None), locale=locale)
    items += normalize_labor_rows(getattr(quote, 'labor_estimate', None), locale=locale)
    used_fallback = False
    if not items:
        used_fallback = True
        estimate = max(to_decimal(getattr(quote, 'total_estimate', None)), ZERO)
        items = [
            LineItem(
                description=labels_for(locale)['service'],
                quantity=Decimal('1'),
                unit_price=estimate,
                discount=ZERO,
            )
        ]
    return MaterializedItems(items=items, totals=compute_totals(items, global_discount), used_fallback=used_fallback)


def has_substantive_items(items: Iterable[Mapping[str, Any] | LineItem]) -> bool:
    for item in normalize_items(items):
        description = item.description.strip()
        # Legacy order forms saved '0' as a placeholder description on blank rows.
        if description and description != '0' and item.unit_price > 0:
            return True
    return False


def materialize_over_existing(
    quote: Any,
    *,
    existing_items: Iterable[Mapping[str, Any] | LineItem],
    confirm_overwrite: bool,
    locale: str | None = None,
    global_discount: Any = ZERO,
) -> MaterializedItems:
    existing = normalize_items(existing_items)
    if not confirm_overwrite and has_substantive_items(existing):
        raise ConfirmationRequired(
            'Loading items from the quote will replace the items already entered',
            existing_count=len(existing),
        )
    return materialize_quote(quote, locale=locale, global_discount=global_discount)
