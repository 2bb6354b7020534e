from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import auth, crud, identity, schemas
from ..deps import current_user_id, ensure_same_user, get_db

router = APIRouter(prefix="/api/users", tags=["users"])
profile_router = APIRouter(prefix="/api/user", tags=["users"])


@router.post("/register", status_code=201)
def register(payload: schemas.UserRegister, db: Session = Depends(get_db)):
    try:
        user = identity.register_user(db, payload)
    except crud.Conflict as e:
        raise HTTPException(status_code=400, detail=str(e))
    token = auth.create_access_token(user.id)
    return {"data": {"user": schemas.UserSummary.model_validate(user), "token": token}}


@router.post("/auth")
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    try:
        user, token = identity.authenticate(db, payload.email, payload.password)
    except identity.InvalidCredentials:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"data": {"user": schemas.UserSummary.model_validate(user), "token": token}}


@router.get("/{user_id}")
async def get_user(user_id: int, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    ensure_same_user(acting_id, user_id)
    user = crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"data": {"user": schemas.UserProfile.from_user(user)}}


def _update_address(db: Session, acting_id: int, prefix: str, address: schemas.AddressIn):
    user = crud.get_user(db, acting_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    updated = crud.update_address(db, user, prefix, address)
    return {"data": {"user": schemas.UserProfile.from_user(updated)}}


@profile_router.post("/billing")
async def update_billing(
    payload: schemas.BillingUpdate, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)
):
    ensure_same_user(acting_id, payload.user_id)
    return _update_address(db, acting_id, "billing", payload.billing)


@profile_router.post("/shipping")
async def update_shipping(
    payload: schemas.ShippingUpdate, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)
):
    ensure_same_user(acting_id, payload.user_id)
    return _update_address(db, acting_id, "shipping", payload.shipping)
