import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .db import Database
from .routers import ROUTERS

logger = logging.getLogger(__name__)

ENDPOINTS = [
    {"path": "/api/products", "description": "Get all products"},
    {"path": "/api/products/:id", "description": "Get a specific product by ID"},
    {"path": "/api/products/category/:id", "description": "Get products by category"},
    {"path": "/api/categories", "description": "Get all categories"},
    {"path": "/api/categories/home", "description": "Get categories with display information"},
    {"path": "/api/states", "description": "Get all states with abbreviation and full name"},
    {"path": "/api/shippingTypes", "description": "Get all shipping types"},
    {"path": "/api/users/register", "description": "Register with email and password"},
    {"path": "/api/users/auth", "description": "Authenticate a user with email and password"},
    {"path": "/api/users/:id", "description": "Get complete user data by ID"},
    {"path": "/api/orders/create", "description": "Place an order"},
    {"path": "/api/auth/:provider", "description": "Sign in with Google or GitHub"},
    {"path": "/api/auth/me", "description": "Resolve the bearer token to a user"},
    {"path": "/api/user-auth", "description": "List or remove linked sign-in methods"},
]


def configure_logging(settings: config.Settings):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application.

    Without ``database`` one is opened from ``DATABASE_URL`` at startup and
    disposed at shutdown; a database passed in is owned by the caller.
    """
    settings = config.get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        db = Database(config.get_settings().database_url) if owned else database
        # Create tables if not existing. Schema changes need a real migration tool.
        db.create_all()
        app.state.database = db
        logger.info("database ready")
        try:
            yield
        finally:
            if owned:
                db.close()

    app = FastAPI(title="Simple Shop API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.exception("database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    @app.get("/")
    async def root():
        return {"message": "Simple Shop API", "endpoints": ENDPOINTS}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
