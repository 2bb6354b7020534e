import logging
import time
from typing import Optional

import jwt
from passlib.context import CryptContext

from . import config

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
STATE_EXP_SECONDS = 60 * 10  # OAuth round-trip window


def create_access_token(user_id: int, expires_in: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_in if expires_in is not None else config.get_settings().jwt_expires_in)
    payload = {"id": int(user_id), "iat": now, "exp": exp}
    return jwt.encode(payload, config.get_settings().jwt_secret, algorithm=ALGORITHM)


def verify_access_token(token: Optional[str]) -> Optional[int]:
    """Return the user id carried by ``token``, or None if it is not a valid, unexpired token.

    Expired, tampered and malformed tokens are indistinguishable to the caller.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            config.get_settings().jwt_secret,
            algorithms=[ALGORITHM],
            options={"require": ["id", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("rejected expired token")
        return None
    except jwt.PyJWTError as e:
        logger.debug("rejected malformed token: %s", e)
        return None
    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        logger.debug("rejected token with non-integer id")
        return None
    return user_id


def create_state_token(provider: str) -> str:
    now = int(time.time())
    payload = {"provider": provider, "iat": now, "exp": now + STATE_EXP_SECONDS}
    return jwt.encode(payload, config.get_settings().jwt_secret, algorithm=ALGORITHM)


def verify_state_token(token: Optional[str], provider: str) -> bool:
    if not token:
        return False
    try:
        payload = jwt.decode(token, config.get_settings().jwt_secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return False
    return payload.get("provider") == provider


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify():
    # Spend the same time as a real check so unknown emails are not distinguishable
    pwd_context.dummy_verify()
