"""
ItemService — billable parts and services.
"""
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Invoice, Item, RecurringInvoice
from app.schemas.item import ItemCreate


class ItemService:

    @staticmethod
    def create(db: Session, data: ItemCreate) -> Item:
        if data.part_no:
            existing = db.query(Item).filter(Item.part_no == data.part_no).first()
            if existing:
                raise ConflictError(f"Part number '{data.part_no}' already exists")

        item = Item(**data.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def get(db: Session, item_id: int) -> Item:
        item = db.query(Item).filter(Item.id == item_id).first()
        if not item:
            raise NotFoundError(f"Item {item_id} not found")
        return item

    @staticmethod
    def list(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 50) -> List[Item]:
        query = db.query(Item)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Item.name.ilike(pattern), Item.part_no.ilike(pattern)))
        return query.order_by(Item.name).offset(skip).limit(limit).all()

    @staticmethod
    def delete(db: Session, item_id: int) -> None:
        item = ItemService.get(db, item_id)

        in_use = (
            db.query(RecurringInvoice).filter(RecurringInvoice.item_id == item_id).first()
            or db.query(Invoice).filter(Invoice.item_id == item_id).first()
        )
        if in_use:
            raise ConflictError(f"Item {item_id} is billed on recurring invoices or invoices")

        db.delete(item)
        db.commit()
