from decimal import Decimal
from typing import Generator
import pytest
from sqlalchemy.pool import StaticPool

from shopapi import auth, config, identity, models, schemas
from shopapi.db import Database
from shopapi.deps import get_db
from shopapi.main import create_app


@pytest.fixture(scope="function")
def database() -> Generator:
    # Use in-memory SQLite with a single connection
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session(database) -> Generator:
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(database, db_session):
    app = create_app(database=database)

    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def settings():
    """Override settings for one test: ``settings(client_url=...)``."""
    previous = config.get_settings()

    def apply(**changes):
        config.override(**changes)
        return config.get_settings()

    yield apply
    config.set_settings(previous)


@pytest.fixture(scope="function")
def catalogue(db_session):
    products = [
        models.Product(name="Trail Runner", price=Decimal("89.99"), category="shoes", in_stock=True,
                       short_desc="Grippy", long_desc="A shoe for trails", img_url="/img/trail.jpg", mfg_name="Acme"),
        models.Product(name="Road Runner", price=Decimal("120.00"), category="shoes", in_stock=True,
                       short_desc="Light", long_desc="A shoe for roads", img_url="/img/road.jpg", mfg_name="Acme"),
        models.Product(name="Rain Jacket", price=Decimal("59.50"), category="apparel", in_stock=True,
                       short_desc="Dry", long_desc="Keeps the rain out", img_url="/img/jacket.jpg", mfg_name="Northwind"),
        models.Product(name="Headlamp", price=Decimal("24.25"), category="accessories", in_stock=False,
                       short_desc="Bright", long_desc="300 lumens", img_url="/img/lamp.jpg", mfg_name="Lumen"),
    ]
    states = [models.State(abbr="CA", state="California"), models.State(abbr="NY", state="New York")]
    shipping_types = [
        models.ShippingType(value="standard", label="Standard (5-7 days)", price=Decimal("5.00")),
        models.ShippingType(value="express", label="Express (1-2 days)", price=Decimal("15.00")),
    ]
    db_session.add_all(products + states + shipping_types)
    db_session.commit()
    return {
        "products": [p.id for p in products],
        "states": [s.id for s in states],
        "shipping_types": [s.id for s in shipping_types],
    }


@pytest.fixture(scope="function")
def make_user(db_session):
    """Register an email/password user directly through the identity layer."""
    def make(email="pat@example.com", password="secret1", first_name="Pat", last_name="Lee"):
        return identity.register_user(
            db_session,
            schemas.UserRegister(email=email, password=password, first_name=first_name, last_name=last_name),
        )
    return make


@pytest.fixture(scope="function")
def auth_header():
    def header(user_id: int) -> dict:
        return {"Authorization": f"Bearer {auth.create_access_token(user_id)}"}
    return header
