from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CustomerCreate(BaseModel):
    """Body for POST /customers/"""
    reference_id: str = Field(..., min_length=1, max_length=50, description="Customer reference code")
    billing_name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "reference_id": "CUST-0001",
                "billing_name": "Sunrise Apartments Owners Association",
                "email": "accounts@sunrise.example.com",
                "phone": "+91 98450 00000",
                "city": "Bengaluru",
            }
        }


class CustomerOut(BaseModel):
    id: int
    reference_id: str
    billing_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
