from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..deps import get_db

router = APIRouter(prefix="/api/products", tags=["products"])
product_router = APIRouter(prefix="/api/product", tags=["products"])


def serialize(products) -> list[schemas.ProductRead]:
    return [schemas.ProductRead.model_validate(p) for p in products]


@router.get("")
async def get_products(
    page: Optional[int] = Query(default=None, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    db: Session = Depends(get_db),
):
    # Without ?page the whole catalogue is returned
    if page is None:
        return {"data": {"products": serialize(crud.list_products(db))}}
    products = crud.list_products(db, offset=(page - 1) * page_size, limit=page_size)
    return {
        "data": {
            "products": serialize(products),
            "page": page,
            "pageSize": page_size,
            "total": crud.count_products(db),
        }
    }


@router.get("/category/{category}")
async def get_products_by_category(category: str, db: Session = Depends(get_db)):
    return {"data": {"products": serialize(crud.list_products_by_category(db, category))}}


async def get_product(product_id: int, db: Session = Depends(get_db)):
    product = crud.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"data": {"product": schemas.ProductRead.model_validate(product)}}


router.add_api_route("/{product_id}", get_product, methods=["GET"])
product_router.add_api_route("/{product_id}", get_product, methods=["GET"])
