from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.reports import RecurringSummaryResponse
from app.services.reports_service import ReportsService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get(
    "/recurring-invoices",
    response_model=RecurringSummaryResponse,
    summary="Get recurring invoice summary",
    description="Returns profile counts per status, how many profiles fall due in the next N days, "
                "and the per-cycle amount billed by active profiles.",
)
@limiter.limit("30/minute")
def get_recurring_summary(request: Request, days: int = Query(30, ge=0), db: Session = Depends(get_db)):
    return ReportsService.get_recurring_summary(db, days)
