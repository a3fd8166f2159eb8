from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from .customer import Base


class Invoice(Base):
    """
    Invoices issued by recurring profiles.

    Line values are copied from the profile at issue time so later edits to
    the profile do not change past invoices.
    """
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_number = Column(
        String(20), nullable=False, unique=True, index=True,
        comment="INV-000001 style number"
    )
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    recurring_invoice_id = Column(
        Integer, ForeignKey("recurring_invoices.id"), nullable=True, index=True,
        comment="Profile that issued the invoice (None once the profile is deleted)"
    )
    invoice_date = Column(Date, nullable=False)

    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    rate = Column(Numeric(12, 2), nullable=False)
    qty = Column(Integer, nullable=False)
    tax = Column(Numeric(5, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    customer = relationship("Customer")

    __table_args__ = (
        Index('idx_invoice_customer_date', 'customer_id', 'invoice_date'),
    )
