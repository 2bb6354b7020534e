from typing import Optional

from fastapi import Header, HTTPException, Request

from . import auth


# Dependency to get DB session per request

def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[len("bearer "):].strip() or None
    return None


def current_user_id(authorization: Optional[str] = Header(default=None)) -> int:
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="No token provided")
    user_id = auth.verify_access_token(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


def ensure_same_user(acting_id: int, claimed_id: Optional[int]):
    # bodies may still carry the user id; it has to be the caller's own
    if claimed_id is not None and claimed_id != acting_id:
        raise HTTPException(status_code=403, detail="forbidden")


