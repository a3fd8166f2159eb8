"""
SQLAlchemy models base and Customer model.

This module defines the declarative base for all models and the Customer
model for the lift/elevator customers that recurring invoices are billed to.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Customer(Base):
    """
    Customers table - billing records for AMC and service customers.

    Attributes:
        id: Unique identifier (auto-increment primary key)
        reference_id: Human-facing customer code shown on screens (unique)
        billing_name: Name printed on invoices
        email: Contact email
        phone: Contact phone number
        city: City of the installation site
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "customers"

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Unique customer identifier",
    )
    reference_id = Column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Customer reference code (unique)",
    )
    billing_name = Column(
        String(255),
        nullable=False,
        comment="Name printed on invoices",
    )
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True, index=True)
    created_at = Column(
        DateTime, default=datetime.utcnow, nullable=False, comment="Creation timestamp"
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
        comment="Last update timestamp",
    )

    recurring_invoices = relationship("RecurringInvoice", back_populates="customer")
