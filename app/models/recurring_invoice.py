from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from .customer import Base


class RecurringInvoice(Base):
    """
    Recurring invoice profiles (AMC renewals and other periodic billing).

    The next invoice date is not stored: it is derived from repeat_every,
    start_date, end_date and last_invoice_date every time it is read.
    """
    __tablename__ = "recurring_invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(
        Integer,
        ForeignKey("customers.id"),
        nullable=False,
        index=True,
    )
    profile_name = Column(String(255), nullable=False)
    repeat_every = Column(
        String(10), nullable=False, default="week",
        comment="week|2week|month|2month|3month|6month|year|2year"
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True, comment="Last date an invoice may fall on (None = open ended)")
    status = Column(
        String(20), nullable=False, default="active", server_default="active",
        comment="active|completed|cancelled"
    )

    # Single line item
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    rate = Column(Numeric(12, 2), nullable=False)
    qty = Column(Integer, nullable=False, default=1)
    tax = Column(Numeric(5, 2), nullable=False, default=0, comment="Tax percent")

    last_invoice_date = Column(Date, nullable=True, comment="Set by invoicing runs")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="recurring_invoices")
    item = relationship("Item")

    __table_args__ = (
        Index('idx_recurring_invoice_status', 'status'),
    )
