from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.config import get_settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.invoice import InvoiceOut
from app.services.invoice_service import InvoiceService

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


@router.get("/", response_model=List[InvoiceOut])
@limiter.limit("60/minute")
def list_invoices(
    request: Request,
    customer_id: Optional[int] = Query(None),
    recurring_invoice_id: Optional[int] = Query(None),
    skip: int = 0,
    limit: Optional[int] = Query(None, ge=1, description="Page size, defaults to DEFAULT_PAGE_SIZE"),
    db: Session = Depends(get_db),
):
    """
    List issued invoices, newest first.
    """
    return InvoiceService.list(
        db,
        customer_id=customer_id,
        recurring_invoice_id=recurring_invoice_id,
        skip=skip,
        limit=limit or get_settings().DEFAULT_PAGE_SIZE,
    )


@router.get("/{invoice_id}", response_model=InvoiceOut)
@limiter.limit("60/minute")
def get_invoice(request: Request, invoice_id: int, db: Session = Depends(get_db)):
    return InvoiceService.get(db, invoice_id)
