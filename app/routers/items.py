from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.config import get_settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.item import ItemCreate, ItemOut
from app.services.item_service import ItemService

router = APIRouter(
    prefix="/items",
    tags=["Items"],
)


@router.get("/", response_model=List[ItemOut])
@limiter.limit("60/minute")
def list_items(
    request: Request,
    search: Optional[str] = Query(None, description="Matches name or part number"),
    skip: int = 0,
    limit: Optional[int] = Query(None, ge=1, description="Page size, defaults to DEFAULT_PAGE_SIZE"),
    db: Session = Depends(get_db),
):
    limit = limit or get_settings().DEFAULT_PAGE_SIZE
    return ItemService.list(db, search=search, skip=skip, limit=limit)


@router.post("/", response_model=ItemOut, status_code=201)
@limiter.limit("20/minute")
def create_item(request: Request, payload: ItemCreate, db: Session = Depends(get_db)):
    return ItemService.create(db, payload)


@router.get("/{item_id}", response_model=ItemOut)
@limiter.limit("60/minute")
def get_item(request: Request, item_id: int, db: Session = Depends(get_db)):
    return ItemService.get(db, item_id)


@router.delete("/{item_id}", status_code=204)
@limiter.limit("10/minute")
def delete_item(request: Request, item_id: int, db: Session = Depends(get_db)):
    ItemService.delete(db, item_id)
    return None
