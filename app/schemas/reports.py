from decimal import Decimal
from pydantic import BaseModel
from datetime import datetime


class RecurringSummaryResponse(BaseModel):
    total: int
    active: int
    completed: int
    cancelled: int
    due_within_period: int
    period_days: int
    active_cycle_amount: Decimal
    currency: str
    generated_at: datetime
