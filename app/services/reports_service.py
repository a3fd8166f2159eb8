from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session
import logging

from app.core.config import get_settings
from app.core.recurring_billing import ProfileStatus, next_invoice_date
from app.models import RecurringInvoice
from app.services.recurring_invoice_service import RecurringInvoiceService

logger = logging.getLogger(__name__)


class ReportsService:
    @staticmethod
    def get_recurring_summary(db: Session, days: int = 30, today: date = None) -> dict:
        """Profile counts per status and what falls due in the next ``days`` days."""
        today = today or date.today()
        horizon = today + timedelta(days=days)
        rows = db.query(RecurringInvoice).all()

        counts = {status.value: 0 for status in ProfileStatus}
        due_within_period = 0
        for row in rows:
            counts[row.status] = counts.get(row.status, 0) + 1
            upcoming = next_invoice_date(RecurringInvoiceService.to_profile(row))
            if upcoming is not None and upcoming <= horizon:
                due_within_period += 1

        return {
            "total": len(rows),
            "active": counts[ProfileStatus.ACTIVE.value],
            "completed": counts[ProfileStatus.COMPLETED.value],
            "cancelled": counts[ProfileStatus.CANCELLED.value],
            "due_within_period": due_within_period,
            "period_days": days,
            "active_cycle_amount": RecurringInvoiceService.active_cycle_amount(rows),
            "currency": get_settings().CURRENCY,
            "generated_at": datetime.utcnow(),
        }
