from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ItemCreate(BaseModel):
    """Body for POST /items/"""
    name: str = Field(..., min_length=1, max_length=255)
    part_no: Optional[str] = Field(None, max_length=100)
    rate: Decimal = Field(Decimal("0.00"), ge=0, max_digits=12, decimal_places=2, description="Default sale rate")
    tax_percent: Decimal = Field(Decimal("0.00"), ge=0, max_digits=5, decimal_places=2)
    unit: Optional[str] = Field(None, max_length=20)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "AMC - Passenger lift (quarterly visit)",
                "part_no": "AMC-PL-Q",
                "rate": "4500.00",
                "tax_percent": "18.00",
                "unit": "visit",
            }
        }


class ItemOut(BaseModel):
    id: int
    name: str
    part_no: Optional[str] = None
    rate: Decimal
    tax_percent: Decimal
    unit: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
