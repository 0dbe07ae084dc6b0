from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paintops.auth import Principal, require_role
from paintops.db import get_db
from paintops.models import UserRole
from paintops.schemas import FinancialSummaryOut
from paintops.services.report_service import financial_summary

router = APIRouter(prefix='/api/reports', tags=['reports'])


@router.get('/financial-summary', response_model=FinancialSummaryOut)
def get_financial_summary(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(UserRole.SUPERADMIN, UserRole.ADMIN)),
):
    return financial_summary(db)
