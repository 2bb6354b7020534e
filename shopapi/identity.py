"""Resolve logins to users.

Three ways in: an OAuth provider profile, an email/password pair, or a new
registration. A user may hold several login methods ("auth rows"); an OAuth
profile whose email matches an existing user is linked to that user instead of
creating a second account.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import auth, crud, models, schemas
from .utils import split_display_name

logger = logging.getLogger(__name__)

EMAIL_PROVIDER = "email"


class IdentityError(Exception):
    """OAuth login could not be resolved to a user; ``code`` is sent back to the browser."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code


class IdentityConflict(IdentityError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("account_conflict", message)


class InvalidCredentials(Exception):
    pass


class LastAuthMethod(crud.Conflict):
    pass


def link_oauth_identity(db: Session, provider: str, profile: schemas.OAuthProfile) -> models.User:
    """Return the user for ``profile``, linking or creating as needed.

    1. a known (provider, provider id) pair returns its user
    2. otherwise an existing user with the profile's email gets this provider linked
    3. otherwise a new user is created
    """
    try:
        existing = crud.get_auth_by_provider(db, provider, profile.provider_id)
        if existing is not None:
            had_avatar = existing.avatar is not None
            crud.touch_auth(db, existing, avatar=profile.avatar_url)
            if not had_avatar and existing.avatar:
                logger.info("stored %s avatar for user %s", provider, existing.user_id)
            return existing.user

        email = profile.email
        if email is None:
            raise IdentityError("no_email", f"{provider} profile {profile.provider_id} has no email")

        user = crud.get_user_by_email(db, email)
        if user is not None:
            crud.create_auth(db, user, provider, profile.provider_id, avatar=profile.avatar_url)
            logger.info("linked %s login to existing user %s", provider, user.id)
            return user

        first_name, last_name = split_display_name(profile.display_name)
        user = crud.create_user_with_auth(
            db,
            email=email,
            first_name=first_name,
            last_name=last_name,
            provider=provider,
            provider_id=profile.provider_id,
            avatar=profile.avatar_url,
        )
        logger.info("created user %s from %s login", user.id, provider)
        return user
    except crud.Conflict as e:
        # another request created the same user or link between our lookup and insert
        logger.warning("identity conflict during %s login: %s", provider, e)
        raise IdentityConflict(str(e)) from e
    except SQLAlchemyError as e:
        logger.exception("database error during %s login", provider)
        raise IdentityError("server_error") from e


def register_user(db: Session, data: schemas.UserRegister) -> models.User:
    if crud.get_user_by_email(db, data.email) is not None:
        raise crud.Conflict("email already registered")
    user = crud.create_user_with_auth(
        db,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        provider=EMAIL_PROVIDER,
        provider_id=crud.normalise_email(data.email),
        password_hash=auth.hash_password(data.password),
    )
    logger.info("registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> tuple[models.User, str]:
    """Check an email/password pair and issue a session token.

    Unknown email, a user without a password, a user whose ``email`` login
    method was removed and a wrong password all raise the same
    InvalidCredentials.
    """
    user = crud.get_user_by_email(db, email)
    login = None
    if user is not None and user.password_hash:
        login = crud.get_auth_by_provider(db, EMAIL_PROVIDER, user.email)
    if login is None:
        auth.dummy_verify()
        raise InvalidCredentials("Invalid credentials")
    if not auth.verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid credentials")

    crud.touch_auth(db, login)
    return user, auth.create_access_token(user.id)


def remove_auth_method(db: Session, auth_id: int, user_id: int):
    if crud.get_auth_for_user(db, auth_id, user_id) is None:
        raise crud.NotFound("Auth provider not found or not authorized")
    if not crud.delete_auth_unless_last(db, auth_id, user_id):
        raise LastAuthMethod("Cannot remove last authentication method. Add another method first.")
    logger.info("removed auth %s from user %s", auth_id, user_id)


def auth_status(db: Session, user: models.User) -> schemas.AuthStatusUser:
    auths = crud.list_auths(db, user.id)
    # newest login that has an avatar
    avatar = next((a.avatar for a in auths if a.avatar), None)
    return schemas.AuthStatusUser(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        avatar=avatar,
        auth_providers=[a.provider for a in auths],
    )
