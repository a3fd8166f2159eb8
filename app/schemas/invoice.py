from decimal import Decimal
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class InvoiceOut(BaseModel):
    """An issued invoice."""
    id: int
    invoice_number: str
    customer_id: int
    recurring_invoice_id: Optional[int] = None
    invoice_date: date
    item_id: int
    rate: Decimal
    qty: int
    tax: Decimal
    total: Decimal
    created_at: datetime

    class Config:
        from_attributes = True
