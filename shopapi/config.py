"""Runtime configuration for the shop API (replaceable during tests/runtime)."""
import os
from typing import NamedTuple


class Settings(NamedTuple):
    database_url: str
    jwt_secret: str
    jwt_expires_in: int
    client_url: str
    api_url: str
    google_client_id: str | None
    google_client_secret: str | None
    github_client_id: str | None
    github_client_secret: str | None
    environment: str
    log_level: str
    cors_origins: tuple[str, ...]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def load_settings() -> Settings:
    client_url = os.getenv("CLIENT_URL", "http://localhost:5173").rstrip("/")
    # credentials are allowed, so only the storefront by default
    origins = os.getenv("CORS_ORIGINS") or client_url
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./shop.db"),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
        # seconds; 7 days
        jwt_expires_in=int(os.getenv("JWT_EXPIRES_IN", "604800")),
        client_url=client_url,
        api_url=os.getenv("API_URL", "http://localhost:8000").rstrip("/"),
        google_client_id=os.getenv("GOOGLE_CLIENT_ID"),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
        github_client_id=os.getenv("GITHUB_CLIENT_ID"),
        github_client_secret=os.getenv("GITHUB_CLIENT_SECRET"),
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )


state = load_settings()


def set_settings(value: Settings):
    global state
    state = value


def override(**changes) -> Settings:
    """Replace selected settings, returning the previous value so callers can restore it."""
    previous = state
    set_settings(state._replace(**changes))
    return previous


def get_settings() -> Settings:
    return state
