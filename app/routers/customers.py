from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.config import get_settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.customer import CustomerCreate, CustomerOut
from app.services.customer_service import CustomerService

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
)


@router.get("/", response_model=List[CustomerOut])
@limiter.limit("60/minute")
def list_customers(
    request: Request,
    search: Optional[str] = Query(None, description="Matches reference id, billing name or city"),
    skip: int = 0,
    limit: Optional[int] = Query(None, ge=1, description="Page size, defaults to DEFAULT_PAGE_SIZE"),
    db: Session = Depends(get_db),
):
    """
    List customers, optionally filtered by a search term.
    """
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    return CustomerService.list(db, search=search, skip=skip, limit=limit)


@router.post("/", response_model=CustomerOut, status_code=201)
@limiter.limit("20/minute")
def create_customer(request: Request, payload: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService.create(db, payload)


@router.get("/{customer_id}", response_model=CustomerOut)
@limiter.limit("60/minute")
def get_customer(request: Request, customer_id: int, db: Session = Depends(get_db)):
    return CustomerService.get(db, customer_id)


@router.delete("/{customer_id}", status_code=204)
@limiter.limit("10/minute")
def delete_customer(request: Request, customer_id: int, db: Session = Depends(get_db)):
    """
    Delete a customer. Customers with recurring invoices or invoices are kept (409).
    """
    CustomerService.delete(db, customer_id)
    return None
