from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..deps import current_user_id, ensure_same_user, get_db

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("/create", status_code=201)
async def create_order(
    payload: schemas.OrderCreate, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)
):
    ensure_same_user(acting_id, payload.user_id)
    if not crud.get_user(db, acting_id):
        raise HTTPException(status_code=404, detail="User not found")
    try:
        created = crud.create_order(db, acting_id, payload.order)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "data": {"order": schemas.OrderRead.from_order(created), "productsAdded": len(created.order_products)},
    }


@router.get("")
async def get_orders(acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    orders = crud.list_orders_for_user(db, acting_id)
    return {"data": {"orders": [schemas.OrderRead.from_order(o) for o in orders]}}


@router.get("/{order_id}")
async def get_order(order_id: int, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    order = crud.get_order_for_user(db, order_id, acting_id)
    if not order:
        raise HTTPException(status_code=404, detail="order not found")
    return {"data": {"order": schemas.OrderRead.from_order(order)}}
