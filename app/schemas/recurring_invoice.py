"""
Schemas for recurring invoice profile endpoints.

Request bodies are deliberately loose: required-ness and ranges are checked
by app.core.recurring_billing.validate so every problem is reported in one
422 response with the same shape.
"""
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime

from app.schemas.invoice import InvoiceOut


class LineItemIn(BaseModel):
    id: Optional[int] = Field(None, description="Item ID")
    rate: Optional[Decimal] = Field(None, description="Rate per unit")
    qty: int = Field(1, description="Quantity (at least 1)")
    tax: Optional[Decimal] = Field(Decimal("0.00"), description="Tax percent")


class RecurringInvoiceCreate(BaseModel):
    """Body for POST /recurring-invoices/ and PUT /recurring-invoices/{id}"""
    customer_id: Optional[int] = None
    profile_name: str = ""
    repeat_every: str = Field("week", description="week|2week|month|2month|3month|6month|year|2year")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    item: Optional[LineItemIn] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        # Date inputs left empty are posted as ""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "profile_name": "Sunrise Apartments - Lift AMC",
                "repeat_every": "3month",
                "start_date": "2024-04-01",
                "end_date": "2025-03-31",
                "item": {"id": 1, "rate": "4500.00", "qty": 2, "tax": "18.00"},
            }
        }


class RecurringInvoiceUpdate(RecurringInvoiceCreate):
    pass


class LineItemOut(BaseModel):
    id: int
    name: Optional[str] = None
    rate: Decimal
    qty: int
    tax: Decimal


class RecurringInvoiceOut(BaseModel):
    """A profile with its derived schedule and amount."""
    id: int
    customer_id: int
    customer_reference: Optional[str] = None
    customer_name: Optional[str] = None
    profile_name: str
    repeat_every: str
    start_date: date
    end_date: Optional[date] = None
    status: str
    item: LineItemOut
    last_invoice_date: Optional[date] = None
    next_invoice_date: Optional[date] = None
    line_total: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime


class GenerateInvoiceRequest(BaseModel):
    """Body for POST /recurring-invoices/{id}/generate-invoice"""
    invoice_date: Optional[date] = Field(None, description="Defaults to today")


class GenerateInvoiceResponse(BaseModel):
    profile: RecurringInvoiceOut
    invoice: InvoiceOut


class InvoicingRunRequest(BaseModel):
    """Body for POST /recurring-invoices/run"""
    run_date: Optional[date] = Field(None, description="Defaults to today")


class InvoicingRunResult(BaseModel):
    run_date: date
    generated: List[InvoiceOut]
    completed: List[int] = Field(..., description="IDs of profiles that reached 'completed'")
