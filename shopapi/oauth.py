"""Google and GitHub authorization-code handshake.

``fetch_profile`` returns the provider's user in a common
``{id, displayName, emails: [{value}], photos: [{value}]}`` shape, which
``schemas.OAuthProfile.from_provider_payload`` validates.
"""
import logging
from typing import NamedTuple, Optional

import requests

from .config import Settings

logger = logging.getLogger(__name__)

TIMEOUT = 10


class ProviderConfig(NamedTuple):
    authorize_url: str
    token_url: str
    scope: str
    extra_params: dict


PROVIDERS = {
    "google": ProviderConfig(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        scope="openid email profile",
        extra_params={"response_type": "code", "include_granted_scopes": "true"},
    ),
    "github": ProviderConfig(
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        scope="read:user user:email",
        extra_params={"allow_signup": "true"},
    ),
}


class OAuthError(Exception):
    pass


def credentials(provider: str, settings: Settings) -> tuple[Optional[str], Optional[str]]:
    if provider == "google":
        return settings.google_client_id, settings.google_client_secret
    if provider == "github":
        return settings.github_client_id, settings.github_client_secret
    return None, None


def is_configured(provider: str, settings: Settings) -> bool:
    client_id, client_secret = credentials(provider, settings)
    return bool(client_id and client_secret)


def redirect_uri(provider: str, settings: Settings) -> str:
    return f"{settings.api_url}/api/auth/{provider}/callback"


def authorization_url(provider: str, settings: Settings, state: str) -> str:
    conf = PROVIDERS[provider]
    client_id, _ = credentials(provider, settings)
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri(provider, settings),
        "scope": conf.scope,
        "state": state,
        **conf.extra_params,
    }
    return requests.Request("GET", conf.authorize_url, params=params).prepare().url


def exchange_code(provider: str, code: str, settings: Settings) -> str:
    """Trade the authorization code for an access token."""
    conf = PROVIDERS[provider]
    client_id, client_secret = credentials(provider, settings)
    data = {
        "client_id": client_id,
        "client_secret": client_secret,
        "code": code,
        "redirect_uri": redirect_uri(provider, settings),
    }
    if provider == "google":
        data["grant_type"] = "authorization_code"
    try:
        res = requests.post(conf.token_url, data=data, headers={"Accept": "application/json"}, timeout=TIMEOUT)
        res.raise_for_status()
        token_json = res.json()
    except (requests.RequestException, ValueError) as e:
        raise OAuthError(f"{provider} token exchange failed") from e
    access_token = token_json.get("access_token")
    if not access_token:
        raise OAuthError(f"{provider} token exchange returned no access token: {token_json.get('error')}")
    return access_token


def _get_json(url: str, access_token: str):
    res = requests.get(
        url,
        headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
        timeout=TIMEOUT,
    )
    res.raise_for_status()
    return res.json()


def google_profile(access_token: str) -> dict:
    info = _get_json("https://www.googleapis.com/oauth2/v3/userinfo", access_token)
    return {
        "id": info.get("sub"),
        "displayName": info.get("name") or "",
        "emails": [{"value": info["email"]}] if info.get("email") else [],
        "photos": [{"value": info["picture"]}] if info.get("picture") else [],
    }


def github_profile(access_token: str) -> dict:
    info = _get_json("https://api.github.com/user", access_token)
    emails = [info["email"]] if info.get("email") else []
    # If email is private, fall back to the account's verified addresses, primary first
    if not emails:
        listed = _get_json("https://api.github.com/user/emails", access_token)
        verified = [e for e in listed if e.get("verified")]
        verified.sort(key=lambda e: not e.get("primary"))
        emails = [e["email"] for e in verified if e.get("email")]
    return {
        "id": info.get("id"),
        "displayName": info.get("name") or info.get("login") or "",
        "emails": [{"value": e} for e in emails],
        "photos": [{"value": info["avatar_url"]}] if info.get("avatar_url") else [],
    }


def fetch_profile(provider: str, code: str, settings: Settings) -> dict:
    access_token = exchange_code(provider, code, settings)
    try:
        if provider == "google":
            return google_profile(access_token)
        return github_profile(access_token)
    except (requests.RequestException, ValueError) as e:
        raise OAuthError(f"{provider} profile request failed") from e
