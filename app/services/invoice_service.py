from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models import Invoice


class InvoiceService:

    @staticmethod
    def next_invoice_number(db: Session) -> str:
        last_id = db.query(func.max(Invoice.id)).scalar() or 0
        return f"INV-{last_id + 1:06d}"

    @staticmethod
    def get(db: Session, invoice_id: int) -> Invoice:
        invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    @staticmethod
    def list(
        db: Session,
        customer_id: Optional[int] = None,
        recurring_invoice_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Invoice]:
        query = db.query(Invoice)
        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)
        if recurring_invoice_id is not None:
            query = query.filter(Invoice.recurring_invoice_id == recurring_invoice_id)
        return (
            query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
