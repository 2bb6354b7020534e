"""OAuth sign-in (Google, GitHub) and the auth-status endpoint."""
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import auth, config, crud, identity, oauth, schemas
from ..deps import current_user_id, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def login_error(code: str) -> RedirectResponse:
    settings = config.get_settings()
    return RedirectResponse(url=f"{settings.client_url}/login?{urlencode({'error': code})}", status_code=302)


def known_provider(provider: str) -> str:
    provider = provider.lower()
    if provider not in oauth.PROVIDERS:
        raise HTTPException(status_code=404, detail="Unsupported provider")
    return provider


@router.get("/me")
async def auth_me(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    user = crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"isValid": True, "user": identity.auth_status(db, user)}


@router.get("/oauth-config")
async def oauth_config():
    """Show which providers are configured and their callback URLs (development only)."""
    settings = config.get_settings()
    if settings.is_production:
        return JSONResponse(status_code=403, content={"message": "This route is only available in development mode"})
    return {
        "message": "OAuth Configuration (DEVELOPMENT ONLY)",
        "providers": {
            name: {
                "configured": oauth.is_configured(name, settings),
                "callbackUrl": oauth.redirect_uri(name, settings),
            }
            for name in oauth.PROVIDERS
        },
        "apiUrl": settings.api_url,
        "clientUrl": settings.client_url,
    }


@router.get("/{provider}")
async def oauth_start(provider: str):
    provider = known_provider(provider)
    settings = config.get_settings()
    if not oauth.is_configured(provider, settings):
        raise HTTPException(status_code=500, detail=f"{provider} OAuth not configured")
    state = auth.create_state_token(provider)
    return RedirectResponse(url=oauth.authorization_url(provider, settings, state), status_code=302)


# Plain def: the provider round-trips block, so this runs in the threadpool
@router.get("/{provider}/callback")
def oauth_callback(
    provider: str,
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    provider = known_provider(provider)
    settings = config.get_settings()
    if error:
        logger.info("%s sign-in cancelled: %s", provider, error)
        return login_error("access_denied")
    if not auth.verify_state_token(state, provider):
        return login_error("invalid_state")
    if not code:
        return login_error("auth_failed")

    try:
        raw = oauth.fetch_profile(provider, code, settings)
    except oauth.OAuthError as e:
        logger.warning("%s handshake failed: %s", provider, e)
        return login_error("provider_error")

    try:
        profile = schemas.OAuthProfile.from_provider_payload(raw)
    except ValidationError:
        logger.warning("%s returned an unusable profile", provider)
        return login_error("auth_failed")

    try:
        user = identity.link_oauth_identity(db, provider, profile)
    except identity.IdentityError as e:
        return login_error(e.code)

    token = auth.create_access_token(user.id)
    query = urlencode({"token": token, "provider": provider})
    return RedirectResponse(url=f"{settings.client_url}/auth/callback?{query}", status_code=302)
