"""
CustomerService — customer records that recurring invoices are billed to.
"""
import logging
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Customer, Invoice, RecurringInvoice
from app.schemas.customer import CustomerCreate

logger = logging.getLogger(__name__)


class CustomerService:

    @staticmethod
    def create(db: Session, data: CustomerCreate) -> Customer:
        existing = db.query(Customer).filter(Customer.reference_id == data.reference_id).first()
        if existing:
            raise ConflictError(f"Customer reference '{data.reference_id}' already exists")

        customer = Customer(**data.model_dump())
        db.add(customer)
        db.commit()
        db.refresh(customer)
        logger.info(f"Created customer {customer.reference_id} (id={customer.id})")
        return customer

    @staticmethod
    def get(db: Session, customer_id: int) -> Customer:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    @staticmethod
    def list(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 50) -> List[Customer]:
        """Case-insensitive match on reference id, billing name or city."""
        query = db.query(Customer)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Customer.reference_id.ilike(pattern),
                Customer.billing_name.ilike(pattern),
                Customer.city.ilike(pattern),
            ))
        return query.order_by(Customer.reference_id).offset(skip).limit(limit).all()

    @staticmethod
    def delete(db: Session, customer_id: int) -> None:
        customer = CustomerService.get(db, customer_id)

        in_use = (
            db.query(RecurringInvoice).filter(RecurringInvoice.customer_id == customer_id).first()
            or db.query(Invoice).filter(Invoice.customer_id == customer_id).first()
        )
        if in_use:
            raise ConflictError(
                f"Customer {customer_id} has recurring invoices or invoices and cannot be deleted"
            )

        db.delete(customer)
        db.commit()
