from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..deps import get_db

router = APIRouter(prefix="/api/shippingTypes", tags=["shipping"])


@router.get("")
async def get_shipping_types(db: Session = Depends(get_db)):
    shipping_types = [schemas.ShippingTypeRead.model_validate(s) for s in crud.list_shipping_types(db)]
    return {"data": {"shippingTypes": shipping_types}}
