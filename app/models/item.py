from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric
from .customer import Base


class Item(Base):
    """
    Items table - spare parts and services that can be billed.
    """
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    part_no = Column(
        String(100), nullable=True, unique=True, index=True,
        comment="Manufacturer or internal part number (unique when set)"
    )
    rate = Column(
        Numeric(12, 2), nullable=False, default=0,
        comment="Default sale rate"
    )
    tax_percent = Column(Numeric(5, 2), nullable=False, default=0)
    unit = Column(String(20), nullable=True)                  # nos|set|visit|...

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
