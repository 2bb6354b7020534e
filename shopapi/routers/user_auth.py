from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, identity, schemas
from ..deps import current_user_id, get_db

router = APIRouter(prefix="/api/user-auth", tags=["auth"])


@router.get("")
async def get_auth_providers(acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    auths = [schemas.AuthMethodRead.model_validate(a) for a in crud.list_auths(db, acting_id)]
    return {"success": True, "data": {"authProviders": auths}}


@router.delete("/{auth_id}")
async def remove_auth_provider(auth_id: int, acting_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    try:
        identity.remove_auth_method(db, auth_id, acting_id)
    except crud.NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except identity.LastAuthMethod as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": {"message": "Authentication provider removed successfully"}}
