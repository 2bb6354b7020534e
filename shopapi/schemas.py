from pydantic import BaseModel, EmailStr, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict
from typing import Any, Optional
from datetime import datetime
from decimal import Decimal

from .utils import sanitize_input


class CamelModel(BaseModel):
    # JSON payloads use camelCase (firstName, shippingTypeId, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


ADDRESS_FIELDS = ("first_name", "last_name", "address1", "address2", "city", "state", "zip", "phone")


class AddressIn(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    address1: str = Field(..., min_length=5, max_length=200)
    address2: Optional[str] = Field(default=None, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip: str = Field(..., min_length=5, max_length=20)
    phone: str = Field(..., min_length=10, max_length=15)

    @field_validator("first_name", "last_name", "address1", "address2", "city", "state")
    def clean_text(cls, v: Optional[str]):
        if v is None:
            return v
        return sanitize_input(v)

    def as_columns(self, prefix: str) -> dict:
        """Map onto the ``billing_*`` / ``shipping_*`` columns of a user or order."""
        return {f"{prefix}_{name}": getattr(self, name) for name in ADDRESS_FIELDS}


class AddressRead(CamelModel):
    first_name: str
    last_name: str
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    zip: str
    phone: str

    @classmethod
    def from_columns(cls, obj: Any, prefix: str) -> "AddressRead":
        return cls(**{name: getattr(obj, f"{prefix}_{name}") for name in ADDRESS_FIELDS})


# -------------------- Catalogue --------------------

class ProductRead(CamelModel):
    id: int
    name: str
    price: float
    category: str
    in_stock: bool
    short_desc: str
    long_desc: str
    img_url: str
    mfg_name: str


class HomeCategory(CamelModel):
    name: str
    img_url: str
    product_count: int


class StateRead(CamelModel):
    abbr: str
    state: str


class ShippingTypeRead(CamelModel):
    id: int
    value: str
    label: str
    price: float


# -------------------- Users --------------------

class UserSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


class UserProfile(UserSummary):
    billing: AddressRead
    shipping: AddressRead

    @classmethod
    def from_user(cls, user) -> "UserProfile":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            billing=AddressRead.from_columns(user, "billing"),
            shipping=AddressRead.from_columns(user, "shipping"),
        )


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=20)


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)

    @field_validator("first_name", "last_name")
    def clean_name(cls, v: str):
        return sanitize_input(v)


class BillingUpdate(CamelModel):
    user_id: Optional[PositiveInt] = None
    billing: AddressIn


class ShippingUpdate(CamelModel):
    user_id: Optional[PositiveInt] = None
    shipping: AddressIn


# -------------------- Orders --------------------

class OrderProductIn(CamelModel):
    product_id: PositiveInt
    qty: PositiveInt


class OrderIn(CamelModel):
    billing: AddressIn
    shipping: AddressIn
    shipping_type_id: PositiveInt
    order_tax: Decimal = Field(default=Decimal("0"), ge=0)
    order_products: list[OrderProductIn] = Field(..., min_length=1)


class OrderCreate(CamelModel):
    user_id: Optional[PositiveInt] = None
    order: OrderIn


class OrderProductRead(CamelModel):
    id: int
    product_id: int
    qty: int
    unit_price: Decimal


class OrderRead(CamelModel):
    id: int
    user_id: int
    shipping_type_id: int
    billing: AddressRead
    shipping: AddressRead
    order_sub_total: Decimal
    order_tax: Decimal
    order_shipping_cost: Decimal
    order_total: Decimal
    created_at: datetime
    order_products: list[OrderProductRead] = []

    @classmethod
    def from_order(cls, order) -> "OrderRead":
        return cls(
            id=order.id,
            user_id=order.user_id,
            shipping_type_id=order.shipping_type_id,
            billing=AddressRead.from_columns(order, "billing"),
            shipping=AddressRead.from_columns(order, "shipping"),
            order_sub_total=order.order_sub_total,
            order_tax=order.order_tax,
            order_shipping_cost=order.order_shipping_cost,
            order_total=order.order_sub_total + order.order_tax + order.order_shipping_cost,
            created_at=order.created_at,
            order_products=[OrderProductRead.model_validate(item) for item in order.order_products],
        )


# -------------------- Authentication --------------------

class AuthMethodRead(CamelModel):
    id: int
    provider: str
    provider_id: str
    avatar: Optional[str] = None
    last_used_at: datetime


class AuthStatusUser(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    avatar: Optional[str] = None
    auth_providers: list[str] = []


class OAuthProfile(BaseModel):
    """Provider profile reduced to the fields identity linking relies on."""

    provider_id: str = Field(..., min_length=1)
    emails: list[str] = []
    display_name: str = ""
    avatar_url: Optional[str] = None

    @field_validator("emails")
    def normalise_emails(cls, v: list[str]):
        return [e.strip().lower() for e in v if e and e.strip()]

    @field_validator("display_name")
    def clean_display_name(cls, v: str):
        return sanitize_input(v)

    @property
    def email(self) -> Optional[str]:
        return self.emails[0] if self.emails else None

    @classmethod
    def from_provider_payload(cls, raw: dict) -> "OAuthProfile":
        """Build from the ``{id, emails[].value, photos[].value, displayName}`` shape."""
        raw_id = raw.get("id")
        emails = [e.get("value") for e in raw.get("emails") or [] if isinstance(e, dict) and e.get("value")]
        photos = [p.get("value") for p in raw.get("photos") or [] if isinstance(p, dict) and p.get("value")]
        return cls(
            provider_id="" if raw_id is None else str(raw_id),
            emails=emails,
            display_name=raw.get("displayName") or "",
            avatar_url=photos[0] if photos else None,
        )
