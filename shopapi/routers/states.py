from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..deps import get_db

router = APIRouter(prefix="/api/states", tags=["states"])


def _states(db: Session):
    return {"result": [schemas.StateRead.model_validate(s) for s in crud.list_states(db)]}


@router.get("")
async def get_states(db: Session = Depends(get_db)):
    return _states(db)


@router.get("/abbr")
async def get_state_abbreviations(db: Session = Depends(get_db)):
    return _states(db)
