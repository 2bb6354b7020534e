from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..deps import get_db

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
async def get_categories(db: Session = Depends(get_db)):
    return {"data": {"categories": crud.list_categories(db)}}


@router.get("/home")
async def get_home_categories(db: Session = Depends(get_db)):
    """Categories with the image of their first product and a product count, alphabetical."""
    categories = [schemas.HomeCategory(**c) for c in crud.list_home_categories(db)]
    return {"data": {"categories": categories}}
