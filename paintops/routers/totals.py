from __future__ import annotations

from fastapi import APIRouter, Depends

from paintops.auth import Principal, get_current_principal
from paintops.schemas import TotalsOut, TotalsPreviewRequest
from paintops.services.totals_service import compute_totals, items_to_json, normalize_items

router = APIRouter(prefix='/api/totals', tags=['totals'])


@router.post('/preview', response_model=TotalsOut)
def preview_totals(payload: TotalsPreviewRequest, _: Principal = Depends(get_current_principal)):
    items = normalize_items(payload.items)
    totals = compute_totals(items, payload.discount)
    return {
        'items': items_to_json(items),
        'subtotal': totals.subtotal,
        'discount': totals.global_discount,
        'total': totals.total,
    }
