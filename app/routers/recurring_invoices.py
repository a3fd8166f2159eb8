"""
Recurring invoice profile endpoints — CRUD, lifecycle events and the invoicing run.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db, handle_database_errors
from app.core.limiter import limiter
from app.schemas.recurring_invoice import (
    GenerateInvoiceRequest,
    GenerateInvoiceResponse,
    InvoicingRunRequest,
    InvoicingRunResult,
    RecurringInvoiceCreate,
    RecurringInvoiceOut,
    RecurringInvoiceUpdate,
)
from app.schemas.invoice import InvoiceOut
from app.services.recurring_invoice_service import RecurringInvoiceService

router = APIRouter(
    prefix="/recurring-invoices",
    tags=["Recurring Invoices"],
)


@router.get("/", response_model=List[RecurringInvoiceOut])
@limiter.limit("60/minute")
def list_recurring_invoices(
    request: Request,
    search: Optional[str] = Query(None, description="Matches customer reference or profile name"),
    status: Optional[str] = Query(None, description="active|completed|cancelled"),
    skip: int = 0,
    limit: Optional[int] = Query(None, ge=1, description="Page size, defaults to DEFAULT_PAGE_SIZE"),
    db: Session = Depends(get_db),
):
    """
    List recurring invoice profiles with their next invoice date and amount.
    """
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    rows = RecurringInvoiceService.list(db, search=search, status=status, skip=skip, limit=limit)
    return [RecurringInvoiceService.to_response(row) for row in rows]


@router.post("/", response_model=RecurringInvoiceOut, status_code=201)
@limiter.limit("20/minute")
@handle_database_errors
def create_recurring_invoice(
    request: Request,
    payload: RecurringInvoiceCreate,
    db: Session = Depends(get_db),
):
    """
    Create a recurring invoice profile. New profiles always start as 'active'.
    """
    row = RecurringInvoiceService.create(db, payload)
    return RecurringInvoiceService.to_response(row)


@router.get("/due", response_model=List[RecurringInvoiceOut])
@limiter.limit("30/minute")
def list_due_recurring_invoices(
    request: Request,
    on: Optional[date] = Query(None, description="Date to check against (YYYY-MM-DD); defaults to today"),
    db: Session = Depends(get_db),
):
    """
    Active profiles whose next invoice date is on or before the given date.
    """
    rows = RecurringInvoiceService.list_due(db, on)
    return [RecurringInvoiceService.to_response(row) for row in rows]


@router.post("/run", response_model=InvoicingRunResult)
@limiter.limit("5/minute")
@handle_database_errors
def run_invoicing(
    request: Request,
    payload: Optional[InvoicingRunRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Issue invoices for every due profile and complete profiles whose schedule ended.
    """
    run_date = payload.run_date if payload else None
    return RecurringInvoiceService.run_due_invoices(db, run_date)


@router.get("/{profile_id}", response_model=RecurringInvoiceOut)
@limiter.limit("60/minute")
def get_recurring_invoice(request: Request, profile_id: int, db: Session = Depends(get_db)):
    row = RecurringInvoiceService.get(db, profile_id)
    return RecurringInvoiceService.to_response(row)


@router.put("/{profile_id}", response_model=RecurringInvoiceOut)
@limiter.limit("20/minute")
@handle_database_errors
def update_recurring_invoice(
    request: Request,
    profile_id: int,
    payload: RecurringInvoiceUpdate,
    db: Session = Depends(get_db),
):
    """
    Edit an active profile. Status changes go through /cancel and the invoicing run.
    """
    row = RecurringInvoiceService.update(db, profile_id, payload)
    return RecurringInvoiceService.to_response(row)


@router.delete("/{profile_id}", status_code=204)
@limiter.limit("10/minute")
@handle_database_errors
def delete_recurring_invoice(request: Request, profile_id: int, db: Session = Depends(get_db)):
    """
    Delete a profile. Invoices it already issued are kept and detached from it.
    """
    RecurringInvoiceService.delete(db, profile_id)
    return None


@router.post("/{profile_id}/cancel", response_model=RecurringInvoiceOut)
@limiter.limit("20/minute")
@handle_database_errors
def cancel_recurring_invoice(request: Request, profile_id: int, db: Session = Depends(get_db)):
    row = RecurringInvoiceService.cancel(db, profile_id)
    return RecurringInvoiceService.to_response(row)


@router.post("/{profile_id}/generate-invoice", response_model=GenerateInvoiceResponse)
@limiter.limit("20/minute")
@handle_database_errors
def generate_invoice(
    request: Request,
    profile_id: int,
    payload: Optional[GenerateInvoiceRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Issue an invoice for one profile now, whether or not it is due.
    """
    invoice_date = payload.invoice_date if payload else None
    row, invoice = RecurringInvoiceService.generate_invoice(db, profile_id, invoice_date)
    return GenerateInvoiceResponse(
        profile=RecurringInvoiceService.to_response(row),
        invoice=InvoiceOut.model_validate(invoice),
    )
