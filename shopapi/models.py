from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    # stored lower-cased; the unique index closes the find-then-create race
    email = Column(String(255), nullable=False, unique=True, index=True)
    # Nullable for users who only ever signed in through an OAuth provider
    password_hash = Column(String, nullable=True)

    billing_first_name = Column(String(100), nullable=False, default="")
    billing_last_name = Column(String(100), nullable=False, default="")
    billing_address1 = Column(String(200), nullable=False, default="")
    billing_address2 = Column(String(200), nullable=True)
    billing_city = Column(String(100), nullable=False, default="")
    billing_state = Column(String(100), nullable=False, default="")
    billing_zip = Column(String(20), nullable=False, default="")
    billing_phone = Column(String(15), nullable=False, default="")

    shipping_first_name = Column(String(100), nullable=False, default="")
    shipping_last_name = Column(String(100), nullable=False, default="")
    shipping_address1 = Column(String(200), nullable=False, default="")
    shipping_address2 = Column(String(200), nullable=True)
    shipping_city = Column(String(100), nullable=False, default="")
    shipping_state = Column(String(100), nullable=False, default="")
    shipping_zip = Column(String(20), nullable=False, default="")
    shipping_phone = Column(String(15), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    auths = relationship("Auth", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user", cascade="all, delete-orphan")


class Auth(Base):
    __tablename__ = "auth"
    __table_args__ = (UniqueConstraint("provider", "provider_id", name="uq_auth_provider_identity"),)

    id = Column(Integer, primary_key=True, index=True)
    # "google", "github" or "email"
    provider = Column(String(50), nullable=False)
    provider_id = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_used_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="auths")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    short_desc = Column(String(500), nullable=False, default="")
    long_desc = Column(Text, nullable=False, default="")
    img_url = Column(String(500), nullable=False, default="")
    mfg_name = Column(String(255), nullable=False, default="")


class State(Base):
    __tablename__ = "states"

    id = Column(Integer, primary_key=True, index=True)
    abbr = Column(String(2), nullable=False, unique=True)
    state = Column(String(100), nullable=False)


class ShippingType(Base):
    __tablename__ = "shipping_types"

    id = Column(Integer, primary_key=True, index=True)
    value = Column(String(50), nullable=False, unique=True)
    label = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shipping_type_id = Column(Integer, ForeignKey("shipping_types.id"), nullable=False)

    billing_first_name = Column(String(100), nullable=False)
    billing_last_name = Column(String(100), nullable=False)
    billing_address1 = Column(String(200), nullable=False)
    billing_address2 = Column(String(200), nullable=True)
    billing_city = Column(String(100), nullable=False)
    billing_state = Column(String(100), nullable=False)
    billing_zip = Column(String(20), nullable=False)
    billing_phone = Column(String(15), nullable=False)

    shipping_first_name = Column(String(100), nullable=False)
    shipping_last_name = Column(String(100), nullable=False)
    shipping_address1 = Column(String(200), nullable=False)
    shipping_address2 = Column(String(200), nullable=True)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_zip = Column(String(20), nullable=False)
    shipping_phone = Column(String(15), nullable=False)

    order_sub_total = Column(Numeric(10, 2), nullable=False)
    order_tax = Column(Numeric(10, 2), nullable=False)
    order_shipping_cost = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="orders")
    shipping_type = relationship("ShippingType")
    order_products = relationship("OrderProduct", back_populates="order", cascade="all, delete-orphan")


class OrderProduct(Base):
    __tablename__ = "order_products"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="order_products")
    product = relationship("Product")
